import pytest

from rmdb.defs import ColType, RecScan, Rid, coltype2str


class _ListScan(RecScan):
    def __init__(self, rids):
        self._rids = list(rids)
        self._pos = 0

    def next(self):
        self._pos += 1

    def is_end(self):
        return self._pos >= len(self._rids)

    def rid(self):
        return self._rids[self._pos]


def test_rid_equality_and_hash():
    assert Rid(1, 2) == Rid(1, 2)
    assert Rid(1, 2) != Rid(2, 1)
    assert len({Rid(1, 2), Rid(1, 2), Rid(1, 3)}) == 2


def test_rid_str():
    assert str(Rid(3, 7)) == "(3, 7)"


@pytest.mark.parametrize(
    "col_type, name",
    [(ColType.TYPE_INT, "INT"), (ColType.TYPE_FLOAT, "FLOAT"), (ColType.TYPE_STRING, "STRING")],
)
def test_coltype2str(col_type, name):
    assert coltype2str(col_type) == name


def test_coltype2str_double_has_no_name():
    with pytest.raises(KeyError):
        coltype2str(ColType.TYPE_DOUBLE)


def test_coltype_ordering_matches_serialised_ints():
    assert [coltype2str(ColType(i)) for i in range(3)] == ["INT", "FLOAT", "STRING"]


def test_recscan_is_abstract():
    with pytest.raises(TypeError):
        RecScan()


def test_recscan_iteration_yields_all_rids():
    rids = [Rid(1, 0), Rid(1, 1), Rid(2, 0)]
    scan = _ListScan(rids)
    assert list(scan) == rids
    assert scan.is_end() is True


def test_recscan_single_then_exhausted():
    scan = _ListScan([Rid(4, 2)])
    assert list(scan) == [Rid(4, 2)]
    assert list(scan) == []