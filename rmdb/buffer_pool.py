"""A fixed-size page cache with LRU replacement in front of the disk manager."""

from __future__ import annotations

import threading
from collections import OrderedDict, deque

from rmdb.defs import INVALID_PAGE_ID, PAGE_SIZE
from rmdb.disk_manager import DiskManager
from rmdb.page import Page, PageId


class _LRUReplacer:
    """Tracks unpinned frames and picks the least recently unpinned one to evict."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._frames: OrderedDict[int, None] = OrderedDict()
        self._lock = threading.Lock()

    def victim(self) -> int | None:
        with self._lock:
            if not self._frames:
                return None
            frame_id, _ = self._frames.popitem(last=False)
            return frame_id

    def pin(self, frame_id: int) -> None:
        with self._lock:
            self._frames.pop(frame_id, None)

    def unpin(self, frame_id: int) -> None:
        with self._lock:
            if frame_id not in self._frames and len(self._frames) < self._capacity:
                self._frames[frame_id] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)


class BufferPoolManager:
    """Caches pages of open files in a fixed number of frames."""

    def __init__(self, pool_size: int, disk_manager: DiskManager) -> None:
        self.pool_size = pool_size
        self._disk = disk_manager
        self._pages = [Page() for _ in range(pool_size)]
        self._page_table: dict[PageId, int] = {}
        self._free_list: deque[int] = deque(range(pool_size))
        self._replacer = _LRUReplacer(pool_size)
        self._latch = threading.Lock()

    @staticmethod
    def mark_dirty(page: Page) -> None:
        page.is_dirty = True

    def _find_victim(self) -> int | None:
        if self._free_list:
            return self._free_list.popleft()
        return self._replacer.victim()

    def _update_page(self, page: Page, new_id: PageId, frame_id: int) -> None:
        """Write the frame's old page back if dirty and rebind the frame to ``new_id``."""
        old_id = page.id
        if old_id.page_no != INVALID_PAGE_ID and page.is_dirty:
            self._disk.write_page(old_id.fd, old_id.page_no, page.data)
            page.is_dirty = False
        self._page_table.pop(old_id, None)
        if new_id.page_no != INVALID_PAGE_ID:
            self._page_table[new_id] = frame_id
        page.reset_memory()
        page.id = new_id

    def fetch_page(self, page_id: PageId) -> Page | None:
        """Pin and return the page, reading it from disk if needed; None if no frame is free."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is not None:
                self._replacer.pin(frame_id)
                page = self._pages[frame_id]
                page.pin_count += 1
                return page
            frame_id = self._find_victim()
            if frame_id is None:
                return None
            page = self._pages[frame_id]
            self._update_page(page, page_id, frame_id)
            page.data[:] = self._disk.read_page(page_id.fd, page_id.page_no, PAGE_SIZE)
            self._replacer.pin(frame_id)
            page.pin_count = 1
            return page

    def unpin_page(self, page_id: PageId, is_dirty: bool) -> bool:
        """Drop one pin; False if the page is not cached or not pinned."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is None:
                return False
            page = self._pages[frame_id]
            if page.pin_count == 0:
                return False
            page.pin_count -= 1
            if page.pin_count == 0:
                self._replacer.unpin(frame_id)
            if is_dirty:
                page.is_dirty = True
            return True

    def flush_page(self, page_id: PageId) -> bool:
        """Write the cached page to disk whether dirty or not; False if it is not cached."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is None or page_id.page_no == INVALID_PAGE_ID:
                return False
            page = self._pages[frame_id]
            self._disk.write_page(page_id.fd, page_id.page_no, page.data)
            page.is_dirty = False
            return True

    def new_page(self, fd: int) -> Page | None:
        """Allocate a fresh page in file ``fd`` and return it pinned; None if no frame is free."""
        with self._latch:
            if fd < 0:
                return None
            frame_id = self._find_victim()
            if frame_id is None:
                return None
            page_id = PageId(fd, self._disk.allocate_page(fd))
            page = self._pages[frame_id]
            self._update_page(page, page_id, frame_id)
            self._replacer.pin(frame_id)
            page.pin_count = 1
            return page

    def delete_page(self, page_id: PageId) -> bool:
        """Evict the page from the pool; False only if it is still pinned."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is None:
                return True
            page = self._pages[frame_id]
            if page.pin_count != 0:
                return False
            self._disk.deallocate_page(page_id.page_no)
            self._update_page(page, PageId(page_id.fd), frame_id)
            self._replacer.pin(frame_id)
            self._free_list.append(frame_id)
            return True

    def flush_all_pages(self, fd: int) -> None:
        """Write every cached page of file ``fd`` to disk."""
        with self._latch:
            for page in self._pages:
                if page.id.fd == fd and page.id.page_no != INVALID_PAGE_ID:
                    self._disk.write_page(fd, page.id.page_no, page.data)
                    page.is_dirty = False