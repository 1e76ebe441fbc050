"""Loading of stored diff files for the patch builder."""

from __future__ import annotations

import os

from .makediff import SIG_BSDIFF40, convert_patch

__all__ = ["get_diff"]


def _change_extension(path: str, extension: str) -> str:
    root, _ = os.path.splitext(path)
    return root + extension


def get_diff(
    diff_path: str | os.PathLike,
    convert_signature: int = -1,
    move_to_used: bool = False,
) -> bytes | None:
    """Read a stored bsdiff patch, optionally re-encoding it.

    With a positive ``convert_signature`` the patch is converted from the
    bzip2 layout to the one that signature names. Returns None when the file
    is missing or cannot be read or converted; in the latter case, with
    ``move_to_used`` set, the file is renamed to the ``.used`` extension.
    """
    path = os.fspath(diff_path)
    if not os.path.isfile(path):
        return None

    try:
        with open(path, "rb") as handle:
            diff_bytes = handle.read()
        if convert_signature > 0:
            return convert_patch(diff_bytes, SIG_BSDIFF40, convert_signature)
        return diff_bytes
    except (OSError, ValueError):
        pass

    if move_to_used:
        os.replace(path, _change_extension(path, ".used"))
    return None