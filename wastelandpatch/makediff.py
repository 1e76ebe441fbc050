"""Binary patch creation in the bsdiff layout, and patch re-encoding.

A patch is a 32-byte header followed by three compressed blocks::

    0       8   signature
    8       8   length of the compressed control block
    16      8   length of the compressed diff block
    24      8   length of the new file
    32      X   compressed control block
    32+X    Y   compressed diff block
    32+X+Y  ?   compressed extra block

The control block is a run of triples ``(x, y, z)``: add ``x`` bytes from the
old file to ``x`` bytes of the diff block, copy ``y`` bytes from the extra
block, then seek forward in the old file by ``z`` bytes. Integers are stored
as 8-byte little-endian sign-magnitude values.

The signature selects the block compression: ``BSDIFF40`` uses bzip2 and
``LZDIFF41`` uses LZMA.
"""

from __future__ import annotations

import bz2
import io
import lzma
from collections.abc import Sequence
from typing import BinaryIO

from .sais import suffix_sort

__all__ = [
    "HEADER_SIZE",
    "SIG_BSDIFF40",
    "SIG_LZDIFF41",
    "CorruptPatchError",
    "write_int64",
    "read_int64",
    "encoding_stream",
    "compare_bytes",
    "match_length",
    "search",
    "create",
    "convert_patch",
]

HEADER_SIZE = 32

_INT64_MAX = (1 << 63) - 1
_CHUNK = 64


class CorruptPatchError(ValueError):
    """The patch header or its blocks are malformed."""


def write_int64(value: int) -> bytes:
    """Encode ``value`` as 8 little-endian sign-magnitude bytes."""
    if not -_INT64_MAX <= value <= _INT64_MAX:
        raise ValueError(f"value out of 64-bit range: {value}")
    raw = bytearray(abs(value).to_bytes(8, "little"))
    if value < 0:
        raw[7] |= 0x80
    return bytes(raw)


def read_int64(data: bytes | bytearray | memoryview) -> int:
    """Decode the first 8 bytes of ``data`` written by :func:`write_int64`."""
    raw = bytearray(bytes(data[:8]))
    if len(raw) < 8:
        raise ValueError("need 8 bytes to read an int64")
    negative = bool(raw[7] & 0x80)
    raw[7] &= 0x7F
    magnitude = int.from_bytes(raw, "little")
    return -magnitude if negative else magnitude


SIG_BSDIFF40 = read_int64(b"BSDIFF40")
SIG_LZDIFF41 = read_int64(b"LZDIFF41")


def encoding_stream(stream: BinaryIO, signature: int, output: bool) -> BinaryIO:
    """Wrap ``stream`` in the compressor or decompressor the signature names.

    With ``output`` true the result compresses what is written to it;
    otherwise it decompresses what is read from ``stream``. Closing the
    wrapper leaves ``stream`` open.
    """
    mode = "wb" if output else "rb"
    if signature == SIG_BSDIFF40:
        return bz2.BZ2File(stream, mode=mode)
    if signature == SIG_LZDIFF41:
        return lzma.LZMAFile(stream, mode=mode, format=lzma.FORMAT_ALONE)
    raise ValueError(f"unknown patch signature: {signature:#x}")


def _match_length(a: bytes, ai: int, b: bytes, bi: int) -> int:
    limit = min(len(a) - ai, len(b) - bi)
    if limit <= 0:
        return 0
    n = 0
    while n + _CHUNK <= limit and a[ai + n : ai + n + _CHUNK] == b[bi + n : bi + n + _CHUNK]:
        n += _CHUNK
    while n < limit and a[ai + n] == b[bi + n]:
        n += 1
    return n


def _compare(a: bytes, ai: int, b: bytes, bi: int) -> int:
    limit = min(len(a) - ai, len(b) - bi)
    k = _match_length(a, ai, b, bi)
    if k < limit:
        return a[ai + k] - b[bi + k]
    return 0


def compare_bytes(left: bytes, right: bytes) -> int:
    """Difference of the first differing bytes, or 0 if one is a prefix of the other."""
    return _compare(bytes(left), 0, bytes(right), 0)


def match_length(old_data: bytes, new_data: bytes) -> int:
    """Length of the common prefix of the two buffers."""
    return _match_length(bytes(old_data), 0, bytes(new_data), 0)


def _search(
    suffixes: Sequence[int], old: bytes, new: bytes, new_offset: int, start: int, end: int
) -> tuple[int, int]:
    while end - start >= 2:
        mid = start + (end - start) // 2
        if _compare(old, suffixes[mid], new, new_offset) < 0:
            start = mid
        else:
            end = mid
    start_len = _match_length(old, suffixes[start], new, new_offset)
    end_len = _match_length(old, suffixes[end], new, new_offset)
    if start_len > end_len:
        return start_len, suffixes[start]
    return end_len, suffixes[end]


def search(
    suffixes: Sequence[int],
    old_data: bytes,
    new_data: bytes,
    new_offset: int,
    start: int,
    end: int,
) -> tuple[int, int]:
    """Find the longest match of ``new_data[new_offset:]`` in ``old_data``.

    ``suffixes`` is the suffix array of ``old_data``; the binary search runs
    over its entries ``start..end`` inclusive. Returns ``(length, position)``.
    """
    return _search(suffixes, bytes(old_data), bytes(new_data), new_offset, start, end)


def create(old_data: bytes, new_data: bytes, signature: int, output: BinaryIO) -> None:
    """Write a patch turning ``old_data`` into ``new_data`` to ``output``.

    ``output`` must be writable and seekable: the header is written last,
    at the position where the patch started.
    """
    if old_data is None:
        raise TypeError("old_data must not be None")
    if new_data is None:
        raise TypeError("new_data must not be None")
    if output is None:
        raise TypeError("output must not be None")
    seekable = getattr(output, "seekable", None)
    if seekable is None or not seekable():
        raise ValueError("Output stream must be seekable.")
    writable = getattr(output, "writable", None)
    if writable is None or not writable():
        raise ValueError("Output stream must be writable.")

    old = bytes(old_data)
    new = bytes(new_data)
    old_len = len(old)
    new_len = len(new)

    header = bytearray(HEADER_SIZE)
    header[0:8] = write_int64(signature)
    header[24:32] = write_int64(new_len)

    start_position = output.tell()
    output.write(bytes(header))

    suffixes = suffix_sort(old)

    def find(offset: int) -> tuple[int, int]:
        if old_len == 0:
            return 0, 0
        return _search(suffixes, old, new, offset, 0, old_len - 1)

    ms_control, ms_diff, ms_extra = io.BytesIO(), io.BytesIO(), io.BytesIO()
    with encoding_stream(ms_control, signature, True) as ctrl_stream, encoding_stream(
        ms_diff, signature, True
    ) as diff_stream, encoding_stream(ms_extra, signature, True) as extra_stream:
        scan = pos = length = 0
        last_scan = last_pos = last_offset = 0

        def old_matches(index: int) -> bool:
            o = index + last_offset
            return 0 <= o < old_len and old[o] == new[index]

        while scan < new_len:
            old_score = 0
            scan += length
            scsc = scan
            while scan < new_len:
                length, pos = find(scan)
                while scsc < scan + length:
                    if old_matches(scsc):
                        old_score += 1
                    scsc += 1
                if (length == old_score and length != 0) or length > old_score + 8:
                    break
                if old_matches(scan):
                    old_score -= 1
                scan += 1

            if length == old_score and scan != new_len:
                continue

            s = sf = lenf = 0
            i = 0
            while last_scan + i < scan and last_pos + i < old_len:
                if old[last_pos + i] == new[last_scan + i]:
                    s += 1
                i += 1
                if s * 2 - i > sf * 2 - lenf:
                    sf = s
                    lenf = i

            lenb = 0
            if scan < new_len:
                s = sb = 0
                i = 1
                while scan >= last_scan + i and pos >= i:
                    if old[pos - i] == new[scan - i]:
                        s += 1
                    if s * 2 - i > sb * 2 - lenb:
                        sb = s
                        lenb = i
                    i += 1

            if last_scan + lenf > scan - lenb:
                overlap = (last_scan + lenf) - (scan - lenb)
                s = ss = lens = 0
                for i in range(overlap):
                    if new[last_scan + lenf - overlap + i] == old[last_pos + lenf - overlap + i]:
                        s += 1
                    if new[scan - lenb + i] == old[pos - lenb + i]:
                        s -= 1
                    if s > ss:
                        ss = s
                        lens = i + 1
                lenf += lens - overlap
                lenb -= lens

            diff_stream.write(
                bytes(
                    (n - o) & 0xFF
                    for n, o in zip(
                        new[last_scan : last_scan + lenf], old[last_pos : last_pos + lenf]
                    )
                )
            )

            extra_length = (scan - lenb) - (last_scan + lenf)
            if extra_length > 0:
                extra_stream.write(new[last_scan + lenf : last_scan + lenf + extra_length])

            ctrl_stream.write(write_int64(lenf))
            ctrl_stream.write(write_int64(extra_length))
            ctrl_stream.write(write_int64((pos - lenb) - (last_pos + lenf)))

            last_scan = scan - lenb
            last_pos = pos - lenb
            last_offset = pos - scan

    control_bytes = ms_control.getvalue()
    diff_bytes = ms_diff.getvalue()
    output.write(control_bytes)
    output.write(diff_bytes)
    output.write(ms_extra.getvalue())
    header[8:16] = write_int64(len(control_bytes))
    header[16:24] = write_int64(len(diff_bytes))

    end_position = output.tell()
    output.seek(start_position)
    output.write(bytes(header))
    output.seek(end_position)


def _recode(block: bytes, input_sig: int, output_sig: int) -> bytes:
    target = io.BytesIO()
    with encoding_stream(io.BytesIO(block), input_sig, False) as source, encoding_stream(
        target, output_sig, True
    ) as sink:
        for chunk in iter(lambda: source.read(1 << 16), b""):
            sink.write(chunk)
    return target.getvalue()


def convert_patch(patch: bytes, input_sig: int, output_sig: int) -> bytes:
    """Re-encode a patch from one signature's compression to another's."""
    if input_sig == output_sig:
        raise ValueError("output must be different from input")

    data = bytes(patch)
    if len(data) < HEADER_SIZE:
        raise CorruptPatchError("Corrupt patch.")
    if read_int64(data[0:8]) != input_sig:
        raise CorruptPatchError("Corrupt patch.")
    control_length = read_int64(data[8:16])
    diff_length = read_int64(data[16:24])
    new_size = read_int64(data[24:32])
    if control_length < 0 or diff_length < 0 or new_size < 0:
        raise CorruptPatchError("Corrupt patch.")

    diff_start = HEADER_SIZE + control_length
    extra_start = diff_start + diff_length
    if extra_start > len(data):
        raise CorruptPatchError("Corrupt patch.")

    try:
        blocks = [
            _recode(data[HEADER_SIZE:diff_start], input_sig, output_sig),
            _recode(data[diff_start:extra_start], input_sig, output_sig),
            _recode(data[extra_start:], input_sig, output_sig),
        ]
    except (OSError, EOFError, lzma.LZMAError) as error:
        raise CorruptPatchError("Corrupt patch.") from error

    control, diff, extra = blocks
    return b"".join(
        [
            write_int64(output_sig),
            write_int64(len(control)),
            write_int64(len(diff)),
            write_int64(new_size),
            control,
            diff,
            extra,
        ]
    )