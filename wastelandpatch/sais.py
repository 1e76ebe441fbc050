"""Suffix array construction by induced sorting (SA-IS).

Builds the suffix array of a byte string in linear time. Suffixes are
ordered lexicographically, and a suffix that is a proper prefix of another
sorts before it.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["suffix_sort"]

_BYTE_ALPHABET_MAX = 255


def suffix_sort(data: bytes | bytearray | memoryview) -> list[int]:
    """Return the suffix array of ``data``.

    Raises TypeError when ``data`` is None.
    """
    if data is None:
        raise TypeError("data must not be None")
    symbols = bytes(data)
    return _sais(symbols, _BYTE_ALPHABET_MAX)


def _classify(s: Sequence[int]) -> list[bool]:
    """Return a flag per position: True for S-type, False for L-type."""
    n = len(s)
    is_s = [False] * n
    for i in range(n - 2, -1, -1):
        if s[i] == s[i + 1]:
            is_s[i] = is_s[i + 1]
        else:
            is_s[i] = s[i] < s[i + 1]
    return is_s


def _sais(s: Sequence[int], upper: int) -> list[int]:
    """Suffix array of ``s`` whose symbols lie in ``0..upper``."""
    n = len(s)
    if n == 0:
        return []
    if n == 1:
        return [0]
    if n == 2:
        return [0, 1] if s[0] < s[1] else [1, 0]

    is_s = _classify(s)

    # Bucket starts for L-type and S-type suffixes of each symbol.
    sum_l = [0] * (upper + 2)
    sum_s = [0] * (upper + 2)
    for symbol, s_type in zip(s, is_s):
        if s_type:
            sum_l[symbol + 1] += 1
        else:
            sum_s[symbol] += 1
    for c in range(upper + 1):
        sum_s[c] += sum_l[c]
        sum_l[c + 1] += sum_s[c]

    sa = [-1] * n

    def induce(lms: Sequence[int]) -> None:
        for i in range(n):
            sa[i] = -1
        buckets = list(sum_s)
        for pos in lms:
            if pos == n:
                continue
            sa[buckets[s[pos]]] = pos
            buckets[s[pos]] += 1

        buckets = list(sum_l)
        sa[buckets[s[n - 1]]] = n - 1
        buckets[s[n - 1]] += 1
        for i in range(n):
            v = sa[i]
            if v >= 1 and not is_s[v - 1]:
                c = s[v - 1]
                sa[buckets[c]] = v - 1
                buckets[c] += 1

        buckets = list(sum_l)
        for i in range(n - 1, -1, -1):
            v = sa[i]
            if v >= 1 and is_s[v - 1]:
                c = s[v - 1] + 1
                buckets[c] -= 1
                sa[buckets[c]] = v - 1

    lms = [i for i in range(1, n) if not is_s[i - 1] and is_s[i]]
    lms_index = {pos: idx for idx, pos in enumerate(lms)}
    m = len(lms)

    induce(lms)

    if m:
        sorted_lms = [v for v in sa if v in lms_index]
        reduced = [0] * m
        name = 0
        reduced[lms_index[sorted_lms[0]]] = 0
        for prev, cur in zip(sorted_lms, sorted_lms[1:]):
            if not _same_lms_substring(s, lms, lms_index, prev, cur):
                name += 1
            reduced[lms_index[cur]] = name
        reduced_sa = _sais(reduced, name)
        induce([lms[idx] for idx in reduced_sa])

    return sa


def _same_lms_substring(
    s: Sequence[int],
    lms: Sequence[int],
    lms_index: dict[int, int],
    left: int,
    right: int,
) -> bool:
    n = len(s)
    m = len(lms)
    next_left = lms_index[left] + 1
    next_right = lms_index[right] + 1
    end_left = lms[next_left] if next_left < m else n
    end_right = lms[next_right] if next_right < m else n
    if end_left - left != end_right - right:
        return False
    while left < end_left:
        if s[left] != s[right]:
            return False
        left += 1
        right += 1
    return left != n and s[left] == s[right]