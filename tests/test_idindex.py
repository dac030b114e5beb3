import pytest

from mediadownloader.idindex import IdIndexMap


@pytest.fixture
def mapping():
    m = IdIndexMap()
    for i in (42, 7, 19, 3, 100):
        m.insert(i)
    return m


def test_len_counts_inserted(mapping):
    assert len(mapping) == 5


def test_indices_follow_ascending_ids(mapping):
    ids = [mapping.id_at(i) for i in range(len(mapping))]
    assert ids == sorted([42, 7, 19, 3, 100])


def test_index_and_id_are_inverse(mapping):
    for i in (42, 7, 19, 3, 100):
        assert mapping.id_at(mapping.index_of(i)) == i


def test_smallest_id_is_first(mapping):
    assert mapping.index_of(3) == 0


def test_missing_lookups_return_minus_one(mapping):
    assert mapping.index_of(8) == -1
    assert mapping.id_at(5) == -1
    assert mapping.id_at(-1) == -1


def test_duplicate_insert_ignored(mapping):
    mapping.insert(19)
    assert len(mapping) == 5


def test_erase_reindexes(mapping):
    mapping.erase(7)
    assert mapping.index_of(7) == -1
    assert len(mapping) == 4
    assert [mapping.id_at(i) for i in range(4)] == [3, 19, 42, 100]


def test_erase_missing_is_noop(mapping):
    mapping.erase(999)
    assert len(mapping) == 5


def test_clear(mapping):
    mapping.clear()
    assert len(mapping) == 0
    assert mapping.index_of(42) == -1