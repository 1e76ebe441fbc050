"""Locating the game folders and asking the user installation questions."""

from __future__ import annotations

import enum
import os
from collections.abc import Callable, Iterable
from typing import Optional, Protocol, TextIO

__all__ = [
    "ErrorPromptResult",
    "StoreReadOnlyError",
    "PathStore",
    "Log",
    "FileDialog",
    "PromptUI",
    "Prompts",
]

_FALLOUT3 = "Fallout 3"
_FALLOUT_NV = "Fallout New Vegas"
_TTW = "Tale of Two Wastelands"
_SUGGESTED_MOD_MANAGER = "Mod Organizer"

_FILE_DOES_NOT_EXIST = "{0} does not exist"
_FILE_ALREADY_EXISTS = "{0} already exists"
_FILE_ALREADY_EXISTS_TITLE = "File already exists"
_REBUILD_PROMPT = "{0} has already been built. Do you want to rebuild it?"
_BUILD_FOMODS_PROMPT = "Do you want to build {0} packages for {1}?"
_BUILD_FOMODS_QUESTION = "Build packages?"
_ERROR_WHILE_PATCHING = "An error occurred while patching {0}."
_ERROR_TITLE = "Error"
_FAILED_TO_SAVE_PATH = "Failed to save path '{0}' for {1}."


class ErrorPromptResult(enum.Enum):
    """What to do after a patching error."""

    CONTINUE = "continue"
    RETRY = "retry"
    ABORT = "abort"


class StoreReadOnlyError(Exception):
    """Raised by a path store that cannot record paths."""


class PathStore:
    """An in-memory mapping from game keys to installation paths."""

    def __init__(self, paths: dict[str, str] | None = None, read_only: bool = False) -> None:
        self._paths: dict[str, str] = dict(paths or {})
        self.read_only = read_only

    def get_path_from_key(self, key_name: str) -> str:
        """The stored path for ``key_name``, or an empty string."""
        return self._paths.get(key_name, "")

    def set_path_from_key(self, key_name: str, path: str) -> None:
        """Record ``path`` for ``key_name``."""
        if self.read_only:
            raise StoreReadOnlyError(f"cannot store a path for {key_name}")
        self._paths[key_name] = path


def _format(msg: str, args: tuple[object, ...]) -> str:
    return msg.format(*args) if args else msg


class Log:
    """Writes messages to a log stream, to the display, or to both."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        display_message: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.stream = stream
        self.display_message = display_message

    def file(self, msg: str, *args: object) -> None:
        """Write a formatted line to the log stream."""
        if self.stream is not None:
            self.stream.write(_format(msg, args) + "\n")
            self.stream.flush()

    def display(self, msg: str, *args: object) -> None:
        """Show a formatted message to the user."""
        if self.display_message is not None:
            self.display_message(_format(msg, args))

    def dual(self, msg: str, *args: object) -> None:
        """Both log and show a formatted message."""
        self.file(msg, *args)
        self.display(msg, *args)


class FileDialog(Protocol):
    """A file chooser; ``show`` returns the chosen file name or None."""

    filter_index: int
    title: str

    def show(self) -> Optional[str]: ...


class PromptUI(Protocol):
    """Message boxes the prompts rely on."""

    def show_message(self, text: str) -> None: ...

    def ask_yes_no(self, text: str, title: str) -> bool: ...

    def ask_abort_retry_ignore(self, text: str, title: str) -> str: ...


class Prompts:
    """Finds game paths through stores and dialogs, and asks build questions."""

    def __init__(
        self,
        open_dialog: FileDialog,
        save_dialog: FileDialog,
        log: Log,
        stores: Iterable[PathStore],
        ui: PromptUI,
    ) -> None:
        self._open_dialog = open_dialog
        self._save_dialog = save_dialog
        self._log = log
        self._stores = list(stores)
        self._ui = ui

        self._fallout3_path = self._try_all_stores_get_path("Fallout3")
        self._fallout_nv_path = self._try_all_stores_get_path("FalloutNV")
        self._ttw_save_path = self._try_all_stores_get_path("TaleOfTwoWastelands")

    @property
    def fallout3_path(self) -> Optional[str]:
        return self._fallout3_path

    @property
    def fallout_nv_path(self) -> Optional[str]:
        return self._fallout_nv_path

    @property
    def ttw_save_path(self) -> Optional[str]:
        return self._ttw_save_path

    @staticmethod
    def _has_exe(folder: Optional[str], exe: str) -> bool:
        return folder is not None and os.path.isfile(os.path.join(folder, exe))

    def prompt_paths(self) -> None:
        """Check the known paths, prompting for any that are missing."""
        self._log.file("Looking for Fallout3.exe")
        if self._has_exe(self._fallout3_path, "Fallout3.exe"):
            self._log.file("\tFound.")
        else:
            self.fallout3_prompt()

        self._log.file("Looking for FalloutNV.exe")
        if self._has_exe(self._fallout_nv_path, "FalloutNV.exe"):
            self._log.file("\tFound.")
        else:
            self.fallout_nv_prompt()

        self._log.file("Looking for Tale of Two Wastelands")
        if self._ttw_save_path is not None and self._ttw_save_path != "\\":
            self._log.file("\tDefault path found.")
        else:
            self.ttw_prompt()

    def fallout3_prompt(self, manual: bool = False) -> Optional[str]:
        """Ask the user for the Fallout 3 folder."""
        self._open_dialog.filter_index = 1
        self._open_dialog.title = _FALLOUT3
        self._fallout3_path = self._find_by_user_prompt(
            self._open_dialog, _FALLOUT3, "Fallout3", manual
        )
        return self._fallout3_path

    def fallout_nv_prompt(self, manual: bool = False) -> Optional[str]:
        """Ask the user for the Fallout New Vegas folder."""
        self._open_dialog.filter_index = 2
        self._open_dialog.title = _FALLOUT_NV
        self._fallout_nv_path = self._find_by_user_prompt(
            self._open_dialog, _FALLOUT_NV, "FalloutNV", manual
        )
        return self._fallout_nv_path

    def ttw_prompt(self, manual: bool = False) -> Optional[str]:
        """Ask the user where to install."""
        self._ttw_save_path = self._find_by_user_prompt(
            self._save_dialog, _TTW, "TaleOfTwoWastelands", manual
        )
        return self._ttw_save_path

    def overwrite_prompt(self, name: str, path: str) -> bool:
        """True if ``path`` may be built: it is absent, or the user chose to rebuild."""
        if not os.path.exists(path):
            self._log.file(_FILE_DOES_NOT_EXIST, path)
            return True

        self._log.file(_FILE_ALREADY_EXISTS, path)
        if self._ui.ask_yes_no(_REBUILD_PROMPT.format(name), _FILE_ALREADY_EXISTS_TITLE):
            os.remove(path)
            self._log.file("Rebuilding {0}", name)
            return True

        self._log.dual("{0} has already been built. Skipping.", name)
        return False

    def build_prompt(self, name: str, path: str) -> bool:
        """Like :meth:`overwrite_prompt`, announcing the build when it goes ahead."""
        if not self.overwrite_prompt(name, path):
            return False
        self._log.dual("Building {0}", name)
        return True

    def build_fomods_prompt(self) -> bool:
        """Ask whether to build mod-manager packages."""
        return self._ui.ask_yes_no(
            _BUILD_FOMODS_PROMPT.format(_TTW, _SUGGESTED_MOD_MANAGER), _BUILD_FOMODS_QUESTION
        )

    def patching_error_prompt(self, file: str) -> ErrorPromptResult:
        """Ask how to proceed after ``file`` failed to patch."""
        choice = self._ui.ask_abort_retry_ignore(_ERROR_WHILE_PATCHING.format(file), _ERROR_TITLE)
        if choice == "retry":
            self._log.dual("Retrying build.")
            return ErrorPromptResult.RETRY
        if choice == "ignore":
            self._log.dual("Ignoring errors.")
            return ErrorPromptResult.CONTINUE
        return ErrorPromptResult.ABORT

    def _try_all_stores_get_path(self, key: str) -> Optional[str]:
        return next(
            (value for value in (s.get_path_from_key(key) for s in self._stores) if value),
            None,
        )

    def _try_all_stores_set_path(self, key: str, path: str) -> bool:
        for store in self._stores:
            try:
                store.set_path_from_key(key, path)
            except StoreReadOnlyError:
                continue
            return True
        return False

    def _find_by_user_prompt(
        self, dialog: FileDialog, name: str, key_name: str, manual: bool = False
    ) -> Optional[str]:
        self._log.file("Prompting user for {0}'s path.", name)
        self._ui.show_message(f"Please select {name}'s location.")

        file_name = dialog.show()
        if not file_name:
            return None

        path = os.path.dirname(file_name)
        self._log.file(
            "User {2}changed {0} directory to '{1}'", name, path, "manually " if manual else " "
        )
        if not self._try_all_stores_set_path(key_name, path):
            self._log.dual(_FAILED_TO_SAVE_PATH, path, key_name)
        return path