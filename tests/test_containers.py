import pytest

from teamkit.containers import (
    contains,
    count,
    data_nd,
    erase,
    find,
    format_sequence,
    remove_all_consts,
    remove_all_pointers,
    same_type,
)


def test_find_first_occurrence():
    items = [3, 1, 3]
    assert find(items, 3) == 0
    assert items[find(items, 1)] == 1


def test_find_missing_is_none():
    assert find([1, 2], 9) is None


def test_contains():
    assert contains(("a", "b"), "b") is True
    assert contains(("a", "b"), "z") is False


def test_erase_list_removes_first_only():
    items = [1, 2, 1]
    assert erase(items, 1) is True
    assert items == [2, 1]


def test_erase_missing_leaves_unchanged():
    items = [1, 2]
    assert erase(items, 7) is False
    assert items == [1, 2]


def test_erase_set_and_dict():
    values = {1, 2}
    assert erase(values, 2) is True
    assert 2 not in values
    mapping = {"k": 1}
    assert erase(mapping, "k") is True
    assert mapping == {}
    assert erase(mapping, "k") is False


def test_erase_unsupported_container():
    with pytest.raises(TypeError):
        erase((1, 2), 1)


def test_count():
    assert count([1, 2, 1, 1], 1) == 3
    assert count([], 1) == 0


def test_same_type():
    assert same_type(int, int, int) is True
    assert same_type(int, float) is False
    assert same_type(str) is True


def test_same_type_needs_argument():
    with pytest.raises(TypeError):
        same_type()


def test_format_sequence():
    assert format_sequence([]) == ""
    assert format_sequence(["a"]) == "a"
    assert format_sequence([1, 2, 3]) == "1 2 3"


def test_data_nd_round_trip():
    assert remove_all_pointers(data_nd("double", 3)) == "double"
    assert data_nd("float", 0) == "float"
    assert data_nd("int", 2).count("*") == 2


def test_data_nd_negative():
    with pytest.raises(ValueError):
        data_nd("int", -1)


def test_remove_all_consts():
    assert remove_all_consts("const int* const*") == "int**"
    assert remove_all_consts("double") == "double"
    assert "const" not in remove_all_consts("const " + data_nd("char", 2))