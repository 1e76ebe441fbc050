# wastelandpatch

Builds binary patches between two versions of a file, re-encodes existing
patches, and provides the small helpers an installer needs around them.
It uses only the standard library.

- `wastelandpatch.sais`: linear-time suffix array construction (SA-IS).
- `wastelandpatch.makediff`: bsdiff-style patch creation, the 64-bit
  sign-magnitude integer encoding used in patch headers and control blocks,
  and conversion of a patch between the bzip2 and LZMA containers.
- `wastelandpatch.util`: MD5 digests of paths, streams and byte strings,
  hex conversion, a wildcard search over byte streams, string truncation,
  folder copying, and discovery of alternate diff versions on disk.
- `wastelandpatch.program`: loading a stored diff file, optionally
  converting it to another signature.
- `wastelandpatch.prompts`: locating the game folders through path stores
  and user dialogs, and asking the build questions an installer needs.

## Installation

```
pip install wastelandpatch
```

To run the tests:

```
pip install "wastelandpatch[test]"
pytest
```

## Suffix arrays

```python
from wastelandpatch.sais import suffix_sort

suffix_sort(b"banana")
# [5, 3, 1, 0, 4, 2]
```

Passing `None` raises `TypeError`.

## Patch format

A patch is a 32-byte header followed by three compressed blocks:

| offset   | size | contents                               |
|----------|------|----------------------------------------|
| 0        | 8    | signature                              |
| 8        | 8    | length X of the compressed control block |
| 16       | 8    | length Y of the compressed diff block  |
| 24       | 8    | length of the new file                 |
| 32       | X    | control block                          |
| 32+X     | Y    | diff block                             |
| 32+X+Y   | rest | extra block                            |

The signature chooses the compression: `SIG_BSDIFF40` (the bytes
`BSDIFF40`) uses bzip2, `SIG_LZDIFF41` (the bytes `LZDIFF41`) uses LZMA.
Any other signature makes `encoding_stream` raise `ValueError`.

Integers are 8-byte little-endian sign-magnitude values:

```python
from wastelandpatch.makediff import read_int64, write_int64

read_int64(write_int64(-42))
# -42
```

## Making and converting patches

```python
import io
from wastelandpatch.makediff import SIG_BSDIFF40, SIG_LZDIFF41, convert_patch, create

patch = io.BytesIO()
create(b"old contents", b"new contents", SIG_BSDIFF40, patch)

lzma_patch = convert_patch(patch.getvalue(), SIG_BSDIFF40, SIG_LZDIFF41)
```

`create` needs a writable, seekable binary stream (otherwise `ValueError`);
the header is written first and rewritten at the start position once the
block sizes are known. `convert_patch` raises `ValueError` if the two
signatures are equal and `CorruptPatchError` (a `ValueError`) if the header
does not carry `input_sig`, has negative lengths, or the blocks cannot be
decompressed.

The lower-level pieces `compare_bytes`, `match_length` and `search` (the
binary search over a suffix array, returning `(length, position)`) are
public as well.

`wastelandpatch.program.get_diff(path, convert_signature=-1, move_to_used=False)`
reads a stored bzip2 patch, converting it when `convert_signature` is
positive. It returns `None` if the file is missing or cannot be read or
converted; in the latter case, with `move_to_used`, the file is renamed to
the `.used` extension.

## Utilities

```python
from wastelandpatch.util import from_md5_string, get_md5_string, truncate

get_md5_string(b"")
# 'D41D8CD98F00B204E9800998ECF8427E'
from_md5_string("D41D8CD98F00B204E9800998ECF8427E")[:2]
# b'\xd4\x1d'
truncate("wasteland", 5)
# 'waste'
```

- `get_md5` / `get_md5_string` accept a path, a bytes-like object or a binary
  stream; a stream is read to the end and closed.
- `find_alternate_versions(path)` takes a diff named
  `name.ext.<old md5>.<new md5>.diff` and returns the sibling files that
  differ only in the old checksum, as `(path, old md5 bytes)` pairs, or
  `None` when the directory does not exist.
- `pattern_search(stream, pattern)` scans a byte stream for a pattern where
  `*` matches any run of bytes and returns a `PatternMatch(found, text)`.
- `copy_folder(src, dest, log)` copies a tree, overwriting files, and
  reports files it is not permitted to copy through `log.dual` and
  `log.file`.

## Prompts

`Prompts(open_dialog, save_dialog, log, stores, ui)` reads the `Fallout3`,
`FalloutNV` and `TaleOfTwoWastelands` paths from the first `PathStore` that
has a non-empty value. `prompt_paths()` checks for `Fallout3.exe` and
`FalloutNV.exe` in those folders and asks for any that are missing;
a chosen path is saved to the first store that accepts it (a read-only
`PathStore` raises `StoreReadOnlyError` and is skipped).

You supply the user interface: dialogs follow the `FileDialog` protocol
(`filter_index`, `title`, `show()` returning a file name or `None`), and
`ui` follows `PromptUI` (`show_message`, `ask_yes_no`,
`ask_abort_retry_ignore` returning `"abort"`, `"retry"` or `"ignore"`).
`Log` writes to an optional text stream (`file`), an optional display
callback (`display`), or both (`dual`).

`overwrite_prompt` and `build_prompt` decide whether an output file may be
(re)built, deleting it when the user chooses to rebuild.
`patching_error_prompt` returns an `ErrorPromptResult`: `CONTINUE`, `RETRY`
or `ABORT`.

## What this package does not do

- It creates and re-encodes patches but does not apply them.
- It has no command-line program and no graphical window; `Prompts` only
  drives whatever dialogs and message boxes you pass in.
- `PathStore` keeps paths in memory; it does not read or write the system
  registry or any settings file.
- It does not read or write game archive files or build patch databases
  from them.