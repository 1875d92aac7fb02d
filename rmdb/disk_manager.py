"""Page-level file I/O, file bookkeeping and the write-ahead log file."""

from __future__ import annotations

import os
import shutil
import stat
import threading

from rmdb.defs import LOG_FILE_NAME, PAGE_SIZE
from rmdb.errors import (
    FileAlreadyExistsError,
    FileMissingError,
    FileNotClosedError,
    FileNotOpenError,
    InternalError,
    UnixError,
)


class DiskManager:
    """Opens, closes, creates and removes files and moves whole pages to and from them."""

    MAX_FD = 8192

    def __init__(self) -> None:
        self._path2fd: dict[str, int] = {}
        self._fd2path: dict[int, str] = {}
        self._fd2pageno: dict[int, int] = {}
        self._released: set[int] = set()
        self._alloc_lock = threading.Lock()
        self._io_lock = threading.Lock()
        self.log_fd = -1

    def __enter__(self) -> DiskManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        for fd in list(self._fd2path):
            self.close_file(fd)
        self.log_fd = -1

    # pages

    def write_page(self, fd: int, page_no: int, data: bytes | bytearray | memoryview) -> None:
        """Write ``data`` at the start of page ``page_no`` of the file."""
        try:
            with self._io_lock:
                os.lseek(fd, page_no * PAGE_SIZE, os.SEEK_SET)
                view = memoryview(data)
                while view:
                    written = os.write(fd, view)
                    view = view[written:]
        except OSError as exc:
            raise InternalError("DiskManager.write_page error") from exc

    def read_page(self, fd: int, page_no: int, num_bytes: int = PAGE_SIZE) -> bytes:
        """Read ``num_bytes`` from page ``page_no``; bytes past the end of file read as zero."""
        buf = bytearray()
        try:
            with self._io_lock:
                os.lseek(fd, page_no * PAGE_SIZE, os.SEEK_SET)
                while len(buf) < num_bytes:
                    chunk = os.read(fd, num_bytes - len(buf))
                    if not chunk:
                        break
                    buf += chunk
        except OSError as exc:
            raise InternalError("DiskManager.read_page error") from exc
        return bytes(buf.ljust(num_bytes, b"\0"))

    def allocate_page(self, fd: int) -> int:
        """Hand out the next page number of the file."""
        if not 0 <= fd < self.MAX_FD:
            raise ValueError(f"file descriptor out of range: {fd}")
        with self._alloc_lock:
            page_no = self._fd2pageno.get(fd, 0)
            self._fd2pageno[fd] = page_no + 1
        return page_no

    def deallocate_page(self, page_no: int) -> None:
        """Record a page number as released; page numbers are never handed out again."""
        with self._alloc_lock:
            self._released.add(page_no)

    def set_fd2pageno(self, fd: int, start_page_no: int) -> None:
        """Set how many pages of the file are already allocated."""
        with self._alloc_lock:
            self._fd2pageno[fd] = start_page_no

    def get_fd2pageno(self, fd: int) -> int:
        """How many pages of the file are allocated so far."""
        with self._alloc_lock:
            return self._fd2pageno.get(fd, 0)

    # directories

    def is_dir(self, path: str | os.PathLike[str]) -> bool:
        return os.path.isdir(path)

    def create_dir(self, path: str | os.PathLike[str]) -> None:
        try:
            os.mkdir(path)
        except OSError as exc:
            raise UnixError(exc.errno) from exc

    def destroy_dir(self, path: str | os.PathLike[str]) -> None:
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise UnixError(exc.errno) from exc

    # files

    def is_file(self, path: str | os.PathLike[str]) -> bool:
        try:
            return stat.S_ISREG(os.stat(path).st_mode)
        except OSError:
            return False

    def create_file(self, path: str | os.PathLike[str]) -> None:
        """Create an empty file; it must not exist already."""
        path = os.fspath(path)
        if self.is_file(path):
            raise FileAlreadyExistsError(path)
        try:
            fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o777)
        except OSError as exc:
            raise UnixError(exc.errno) from exc
        os.close(fd)

    def destroy_file(self, path: str | os.PathLike[str]) -> None:
        """Remove a file that exists and is not open."""
        path = os.fspath(path)
        if not self.is_file(path):
            raise FileMissingError(path)
        if path in self._path2fd:
            raise FileNotClosedError(path)
        try:
            os.unlink(path)
        except OSError as exc:
            raise UnixError(exc.errno) from exc

    def open_file(self, path: str | os.PathLike[str]) -> int:
        """Open a file for reading and writing; a file already open keeps its descriptor."""
        path = os.fspath(path)
        if not self.is_file(path):
            raise FileMissingError(path)
        if path in self._path2fd:
            return self._path2fd[path]
        try:
            fd = os.open(path, os.O_RDWR)
        except OSError as exc:
            raise UnixError(exc.errno) from exc
        self._path2fd[path] = fd
        self._fd2path[fd] = path
        return fd

    def close_file(self, fd: int) -> None:
        """Close a file opened by this manager."""
        path = self._fd2path.pop(fd, None)
        if path is None:
            raise FileNotOpenError(fd)
        del self._path2fd[path]
        if fd == self.log_fd:
            self.log_fd = -1
        os.close(fd)

    def get_file_size(self, file_name: str | os.PathLike[str]) -> int:
        """Size of the file in bytes, or -1 if it cannot be examined."""
        try:
            return os.stat(file_name).st_size
        except OSError:
            return -1

    def get_file_name(self, fd: int) -> str:
        try:
            return self._fd2path[fd]
        except KeyError:
            raise FileNotOpenError(fd) from None

    def get_file_fd(self, file_name: str | os.PathLike[str]) -> int:
        """Descriptor of the file, opening it first if needed."""
        file_name = os.fspath(file_name)
        fd = self._path2fd.get(file_name)
        return fd if fd is not None else self.open_file(file_name)

    # log

    def _ensure_log_open(self) -> int:
        if self.log_fd == -1:
            self.log_fd = self.open_file(LOG_FILE_NAME)
        return self.log_fd

    def read_log(self, size: int, offset: int) -> bytes | None:
        """Read up to ``size`` log bytes from ``offset``; None if ``offset`` lies past the end."""
        log_fd = self._ensure_log_open()
        file_size = self.get_file_size(LOG_FILE_NAME)
        if offset > file_size:
            return None
        size = min(size, file_size - offset)
        if size <= 0:
            return b""
        with self._io_lock:
            os.lseek(log_fd, offset, os.SEEK_SET)
            data = os.read(log_fd, size)
        if len(data) != size:
            raise InternalError("DiskManager.read_log short read")
        return data

    def write_log(self, data: bytes | bytearray) -> None:
        """Append ``data`` to the log file."""
        log_fd = self._ensure_log_open()
        try:
            with self._io_lock:
                os.lseek(log_fd, 0, os.SEEK_END)
                written = os.write(log_fd, data)
        except OSError as exc:
            raise UnixError(exc.errno) from exc
        if written != len(data):
            raise UnixError()