from rmdb.defs import INVALID_PAGE_ID, PAGE_SIZE
from rmdb.page import Page, PageId


def test_page_id_default_page_no_is_invalid():
    assert PageId(3).page_no == INVALID_PAGE_ID


def test_page_id_equality_and_hash():
    assert PageId(1, 2) == PageId(1, 2)
    assert PageId(1, 2) != PageId(2, 2)
    table = {PageId(1, 2): "a"}
    assert table[PageId(1, 2)] == "a"


def test_page_id_str():
    assert str(PageId(3, 5)) == "{fd: 3 page_no: 5}"


def test_page_id_key_distinguishes_files():
    assert PageId(0, 9).key() == 9
    assert PageId(1, 9).key() != PageId(2, 9).key()
    assert PageId(0, INVALID_PAGE_ID).key() == INVALID_PAGE_ID


def test_page_id_ordering_by_fd_then_page():
    assert PageId(1, 5) < PageId(2, 0)
    assert PageId(1, 1) < PageId(1, 2)
    assert not (PageId(1, 2) < PageId(1, 2))


def test_new_page_is_zeroed_and_clean():
    page = Page()
    assert len(page.data) == PAGE_SIZE
    assert page.data == bytearray(PAGE_SIZE)
    assert page.is_dirty is False
    assert page.pin_count == 0


def test_reset_memory_zeroes_in_place():
    page = Page()
    buf = page.data
    page.data[0:5] = b"Hello"
    page.reset_memory()
    assert page.data is buf
    assert page.data == bytearray(PAGE_SIZE)


def test_page_lsn_round_trip():
    page = Page()
    page.page_lsn = 42
    assert page.page_lsn == 42
    assert int.from_bytes(page.data[Page.OFFSET_LSN:Page.OFFSET_PAGE_HDR], "little", signed=True) == 42
    assert page.data[Page.OFFSET_PAGE_HDR:] == bytearray(PAGE_SIZE - Page.OFFSET_PAGE_HDR)


def test_page_lsn_negative():
    page = Page()
    page.page_lsn = -1
    assert page.page_lsn == -1


def test_pages_have_independent_buffers():
    a, b = Page(), Page()
    a.data[0] = 1
    assert b.data[0] == 0