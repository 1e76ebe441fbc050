import io

from wastelandpatch.makediff import SIG_BSDIFF40, SIG_LZDIFF41, create, read_int64
from wastelandpatch.program import get_diff


def _bsdiff_patch(old: bytes, new: bytes) -> bytes:
    out = io.BytesIO()
    create(old, new, SIG_BSDIFF40, out)
    return out.getvalue()


def test_missing_file_returns_none(tmp_path):
    assert get_diff(tmp_path / "absent.diff") is None


def test_plain_read_returns_bytes(tmp_path):
    path = tmp_path / "a.diff"
    path.write_bytes(b"raw patch content")
    assert get_diff(path) == b"raw patch content"


def test_conversion_produces_target_signature(tmp_path):
    old = b"hello world, this is the old file" * 4
    new = b"hello world, this is the new file" * 4
    path = tmp_path / "b.diff"
    path.write_bytes(_bsdiff_patch(old, new))
    converted = get_diff(path, SIG_LZDIFF41)
    assert converted[:8] == b"LZDIFF41"
    assert read_int64(converted[24:32]) == len(new)


def test_corrupt_patch_returns_none_and_keeps_file(tmp_path):
    path = tmp_path / "c.diff"
    path.write_bytes(b"not a patch")
    assert get_diff(path, SIG_LZDIFF41) is None
    assert path.exists()


def test_corrupt_patch_moved_to_used(tmp_path):
    path = tmp_path / "d.diff"
    path.write_bytes(b"not a patch")
    assert get_diff(path, SIG_LZDIFF41, True) is None
    assert not path.exists()
    assert (tmp_path / "d.used").read_bytes() == b"not a patch"


def test_successful_read_not_moved(tmp_path):
    path = tmp_path / "e.diff"
    path.write_bytes(b"data")
    assert get_diff(path, -1, True) == b"data"
    assert path.exists()