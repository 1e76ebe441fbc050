import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wastelandpatch.sais import suffix_sort


def _assert_is_suffix_array(data: bytes, sa: list[int]) -> None:
    assert sorted(sa) == list(range(len(data)))
    for a, b in zip(sa, sa[1:]):
        assert data[a:] < data[b:]


def test_empty_input_gives_empty_array():
    assert suffix_sort(b"") == []


def test_single_byte():
    assert suffix_sort(b"\x07") == [0]


def test_banana_worked_example():
    assert suffix_sort(b"banana") == [5, 3, 1, 0, 4, 2]


def test_none_raises_type_error():
    with pytest.raises(TypeError):
        suffix_sort(None)


@pytest.mark.parametrize(
    "data",
    [
        b"ab",
        b"ba",
        b"aa",
        b"aaaaaaaaaa",
        b"abababababab",
        b"mississippi",
        bytes(range(256)),
        bytes(range(255, -1, -1)),
        b"\xff\xff\x00\xff\x00",
    ],
)
def test_known_shapes_are_sorted(data):
    _assert_is_suffix_array(data, suffix_sort(data))


def test_accepts_bytearray():
    data = bytearray(b"abracadabra")
    assert suffix_sort(data) == suffix_sort(bytes(data))


@settings(max_examples=200)
@given(st.binary(max_size=300))
def test_random_bytes_are_sorted(data):
    _assert_is_suffix_array(data, suffix_sort(data))


@settings(max_examples=100)
@given(st.lists(st.sampled_from(b"ab"), max_size=200))
def test_small_alphabet_is_sorted(symbols):
    data = bytes(symbols)
    _assert_is_suffix_array(data, suffix_sort(data))