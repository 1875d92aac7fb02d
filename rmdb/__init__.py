"""Disk storage, buffer pool, catalog metadata and transaction layers of a small relational database engine."""

__version__ = "0.1.0"