"""Checksums, file-name helpers and small stream utilities."""

from __future__ import annotations

import hashlib
import os
import re
import shutil
from pathlib import Path
from typing import BinaryIO, NamedTuple, Protocol, Union

__all__ = [
    "PatternMatch",
    "get_md5",
    "make_md5_string",
    "from_md5_string",
    "get_md5_string",
    "find_alternate_versions",
    "truncate",
    "pattern_search",
    "copy_folder",
]

_CHUNK_SIZE = 1 << 16

Md5Source = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO]


class _Logger(Protocol):
    def file(self, msg: str, *args: object) -> None: ...

    def dual(self, msg: str, *args: object) -> None: ...


class PatternMatch(NamedTuple):
    """Outcome of :func:`pattern_search`."""

    found: bool
    text: str


def _md5_of_stream(stream: BinaryIO) -> bytes:
    digest = hashlib.md5()
    with stream:
        for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.digest()


def get_md5(source: Md5Source) -> bytes:
    """MD5 digest of a file path, a bytes-like buffer, or a binary stream.

    A stream is read to its end and closed.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return hashlib.md5(source).digest()
    if isinstance(source, (str, os.PathLike)):
        return _md5_of_stream(open(source, "rb"))
    if hasattr(source, "read"):
        return _md5_of_stream(source)
    raise TypeError(f"cannot hash object of type {type(source).__name__}")


def make_md5_string(md5: bytes) -> str:
    """Upper-case hexadecimal form of a digest, with no separators."""
    return bytes(md5).hex().upper()


def from_md5_string(md5_str: str) -> bytes:
    """Parse pairs of hex digits into bytes; a trailing odd digit is ignored."""
    usable = len(md5_str) - len(md5_str) % 2
    pairs = (md5_str[i : i + 2] for i in range(0, usable, 2))
    try:
        return bytes(int(pair, 16) for pair in pairs)
    except ValueError as error:
        raise ValueError(f"invalid hexadecimal string: {md5_str!r}") from error


def get_md5_string(source: Md5Source) -> str:
    """Upper-case hexadecimal MD5 of a path, buffer or stream."""
    return make_md5_string(get_md5(source))


def find_alternate_versions(file: str | os.PathLike) -> list[tuple[str, bytes]] | None:
    """Find sibling diffs that differ from ``file`` only in their old checksum.

    Diff names look like ``name.ext.<old md5>.<new md5>.diff``. Returns a list
    of ``(path, old md5)`` pairs, or None when the directory does not exist.
    """
    file = os.fspath(file)
    just_name = os.path.basename(file)
    parts = just_name.split(".")
    if len(parts) < 3:
        raise ValueError(f"not a diff file name: {just_name!r}")
    wildcard_at = len(parts) - 3
    regex = re.compile(
        r"\.".join(".*" if i == wildcard_at else re.escape(part) for i, part in enumerate(parts))
        + r"\Z",
        re.DOTALL,
    )

    just_dir = os.path.dirname(file)
    if not just_dir or not os.path.isdir(just_dir):
        return None

    found = []
    for name in sorted(os.listdir(just_dir)):
        other = os.path.join(just_dir, name)
        if other == file or not os.path.isfile(other) or not regex.match(name):
            continue
        other_parts = name.split(".")
        found.append((other, from_md5_string(other_parts[-3])))
    return found


def truncate(value: str, max_length: int) -> str:
    """Cut ``value`` down to at most ``max_length`` characters."""
    if not value:
        return value
    if len(value) <= max_length:
        return value
    if max_length < 0:
        raise ValueError("max_length must not be negative")
    return value[:max_length]


def pattern_search(stream: BinaryIO, pattern: str) -> PatternMatch:
    """Scan a byte stream for ``pattern``, where ``*`` matches any run of bytes.

    Bytes before the literal head of the pattern are skipped. The text
    collected from the first matching byte onward is returned together with
    whether the whole pattern was matched.
    """
    readable = getattr(stream, "readable", None)
    if readable is not None and not readable():
        raise ValueError("Stream must be readable")

    collected: list[str] = []
    wild = False
    found = False
    match_len = 0

    for chunk in iter(lambda: stream.read(1), b""):
        char = chr(chunk[0])
        if wild:
            match_len += 1
            collected.append(char)
            if "".join(collected).endswith(pattern):
                found = True
                break
            continue
        if match_len >= len(pattern):
            raise ValueError("pattern exhausted without a wildcard")
        if pattern[match_len] == char:
            match_len += 1
            collected.append(char)
        elif pattern[match_len] == "*":
            collected.append(char)
            pattern = pattern[match_len + 1 :]
            match_len = 0
            wild = True

    return PatternMatch(found, "".join(collected))


def copy_folder(in_folder: str | os.PathLike, dest_folder: str | os.PathLike, log: _Logger) -> None:
    """Copy a directory tree, overwriting existing files.

    Files that cannot be copied for lack of permission are reported to ``log``.
    """
    source = Path(in_folder)
    dest = Path(dest_folder)
    dest.mkdir(parents=True, exist_ok=True)

    for folder in sorted(p for p in source.rglob("*") if p.is_dir()):
        (dest / folder.relative_to(source)).mkdir(parents=True, exist_ok=True)

    for file in sorted(p for p in source.rglob("*") if p.is_file()):
        relative = file.relative_to(source)
        try:
            shutil.copy2(file, dest / relative)
        except PermissionError as error:
            log.dual("ERROR: " + os.sep + str(relative) + " did not copy successfully")
            log.file(str(error))