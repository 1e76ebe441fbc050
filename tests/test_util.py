import hashlib
import io
import os
from unittest import mock

import pytest
from hypothesis import given
from hypothesis import strategies as st

from wastelandpatch.util import (
    PatternMatch,
    copy_folder,
    find_alternate_versions,
    from_md5_string,
    get_md5,
    get_md5_string,
    make_md5_string,
    pattern_search,
    truncate,
)


class RecordingLog:
    def __init__(self):
        self.file_messages = []
        self.dual_messages = []

    def file(self, msg, *args):
        self.file_messages.append(msg.format(*args))

    def dual(self, msg, *args):
        self.dual_messages.append(msg.format(*args))


def test_md5_string_of_empty_input():
    assert get_md5_string(b"") == "D41D8CD98F00B204E9800998ECF8427E"


def test_get_md5_path_buffer_and_stream_agree(tmp_path):
    payload = b"wasteland" * 10000
    target = tmp_path / "data.bin"
    target.write_bytes(payload)
    stream = io.BytesIO(payload)
    expected = hashlib.md5(payload).digest()
    assert get_md5(payload) == expected
    assert get_md5(str(target)) == expected
    assert get_md5(target) == expected
    assert get_md5(stream) == expected
    assert stream.closed


def test_get_md5_rejects_unknown_type():
    with pytest.raises(TypeError):
        get_md5(12345)


@given(st.binary(max_size=64))
def test_md5_string_round_trip(data):
    text = make_md5_string(data)
    assert text == text.upper()
    assert from_md5_string(text) == data
    assert from_md5_string(text.lower()) == data


def test_from_md5_string_ignores_trailing_odd_digit():
    assert from_md5_string("abc") == from_md5_string("ab")


def test_from_md5_string_rejects_non_hex():
    with pytest.raises(ValueError):
        from_md5_string("0g")


def test_truncate_empty_is_unchanged():
    assert truncate("", 5) == ""


@given(st.text(max_size=50), st.integers(min_value=0, max_value=60))
def test_truncate_invariants(value, max_length):
    result = truncate(value, max_length)
    assert len(result) <= max(max_length, 0) or result == value
    assert value.startswith(result)
    assert result == value[:max_length]


def test_truncate_negative_length_raises():
    with pytest.raises(ValueError):
        truncate("abc", -1)


def test_pattern_search_finds_wildcard_match():
    stream = io.BytesIO(b"zzABxyCDzz")
    assert pattern_search(stream, "AB*CD") == PatternMatch(True, "ABxyCD")


def test_pattern_search_not_found():
    stream = io.BytesIO(b"ABxyC")
    result = pattern_search(stream, "AB*CD")
    assert result.found is False
    assert result.text == "ABxyC"


def test_pattern_search_requires_readable_stream(tmp_path):
    with open(tmp_path / "out.bin", "wb") as handle:
        with pytest.raises(ValueError):
            pattern_search(handle, "A*B")


def test_find_alternate_versions(tmp_path):
    old_a = "0123456789ABCDEF0123456789ABCDEF"
    old_b = "FEDCBA9876543210FEDCBA9876543210"
    new = "00112233445566778899AABBCCDDEEFF"
    main = tmp_path / f"gun.nif.{old_a}.{new}.diff"
    alt = tmp_path / f"gun.nif.{old_b}.{new}.diff"
    unrelated = tmp_path / f"other.nif.{old_b}.{new}.diff"
    for path in (main, alt, unrelated):
        path.write_bytes(b"x")

    result = find_alternate_versions(str(main))
    assert result == [(str(alt), bytes.fromhex(old_b))]


def test_find_alternate_versions_missing_directory(tmp_path):
    missing = tmp_path / "nope" / "a.nif.00.11.diff"
    assert find_alternate_versions(str(missing)) is None


def test_copy_folder_copies_tree(tmp_path):
    src = tmp_path / "src"
    (src / "sub" / "deep").mkdir(parents=True)
    (src / "empty").mkdir()
    (src / "top.txt").write_bytes(b"top")
    (src / "sub" / "deep" / "leaf.bin").write_bytes(b"leaf")
    dest = tmp_path / "dest"
    dest.mkdir()
    (dest / "top.txt").write_bytes(b"stale")

    log = RecordingLog()
    copy_folder(str(src), str(dest), log)

    assert (dest / "top.txt").read_bytes() == b"top"
    assert (dest / "sub" / "deep" / "leaf.bin").read_bytes() == b"leaf"
    assert (dest / "empty").is_dir()
    assert log.dual_messages == []


def test_copy_folder_reports_permission_errors(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "locked.txt").write_bytes(b"data")
    log = RecordingLog()
    with mock.patch(
        "wastelandpatch.util.shutil.copy2", side_effect=PermissionError("denied")
    ):
        copy_folder(src, tmp_path / "dest", log)
    assert log.dual_messages == ["ERROR: " + os.sep + "locked.txt did not copy successfully"]
    assert log.file_messages == ["denied"]