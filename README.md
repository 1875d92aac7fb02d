# rmdb

The lower layers of a small relational database engine: page-oriented disk
storage, a buffer pool with LRU replacement, catalog metadata with a text
format, and transaction bookkeeping with two-phase locking.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `rmdb.disk_manager.DiskManager` creates, opens, closes and removes files and
  directories, reads and writes whole pages (`write_page`, `read_page`), hands
  out page numbers per file (`allocate_page`, `set_fd2pageno`,
  `get_fd2pageno`), and appends to and reads from the log file `db.log`
  (`write_log`, `read_log`). Used as a context manager it closes every file it
  opened on exit.
- `rmdb.buffer_pool.BufferPoolManager` caches pages in a fixed number of
  frames. `new_page(fd)` and `fetch_page(page_id)` return a pinned `Page`, or
  `None` when every frame is pinned; `unpin_page`, `flush_page`,
  `flush_all_pages` and `delete_page` manage the cached pages. The least
  recently unpinned frame is evicted first, and dirty pages are written back
  before their frame is reused.
- `rmdb.page` defines `PageId` (file descriptor and page number) and `Page`
  (`id`, `data`, `is_dirty`, `pin_count`, `page_lsn`).
- `rmdb.defs` holds `Rid`, `ColType`, `coltype2str`, the abstract `RecScan`
  cursor and engine constants such as `PAGE_SIZE`.
- `rmdb.meta` holds `ColMeta`, `IndexMeta`, `TabMeta` and `DbMeta`. A catalog
  is written to text with `DbMeta.dumps` and read back with `DbMeta.loads`.
- `rmdb.common` holds query building blocks: `TabCol`, `Value` (with
  `of_int`, `of_float`, `of_str` and fixed-width `to_bytes`), `CompOp`,
  `AggFuncType`, `AggFunc`, `Condition` and `SetClause`.
- `rmdb.txn_defs` defines transaction states, isolation levels, `WriteRecord`,
  `LockDataId` and `TransactionAbortError`.
- `rmdb.transaction.Transaction` keeps a transaction's write set, lock set and
  undo logs (`UndoLog`, `UndoLink`).
- `rmdb.lock_manager.LockManager` grants shared, exclusive and intention locks
  on tables and records. A request that conflicts with another transaction's
  lock, or that comes after the transaction released a lock, raises
  `TransactionAbortError` at once instead of waiting.
- `rmdb.transaction_manager.TransactionManager` begins, commits and aborts
  transactions. On abort it undoes the write set newest first through the
  record file handles found in the `fhs` mapping of the system manager object
  it was given.
- `rmdb.watermark.Watermark` tracks the lowest read timestamp among running
  transactions.
- `rmdb.errors` and `rmdb.exception` define the exceptions the engine raises.

## Example

```python
from rmdb.disk_manager import DiskManager
from rmdb.buffer_pool import BufferPoolManager
from rmdb.page import PageId

disk = DiskManager()
disk.create_file("table.dat")
fd = disk.open_file("table.dat")

pool = BufferPoolManager(10, disk)
page = pool.new_page(fd)
page.data[:5] = b"Hello"
pool.unpin_page(page.id, True)
pool.flush_all_pages(fd)

again = pool.fetch_page(PageId(fd, page.id.page_no))
assert bytes(again.data[:5]) == b"Hello"
pool.unpin_page(again.id, False)

disk.close_file(fd)
disk.destroy_file("table.dat")
```

Missing files, files that already exist, files still open and unknown file
descriptors raise the exceptions in `rmdb.errors`.

## What this package does not do

There is no SQL parser, planner or executor, no record-file or index layer,
no log manager, and no command or server to run. `TransactionManager` expects
the caller to supply objects for record files and the log; the package
provides only the storage, catalog and transaction pieces listed above.