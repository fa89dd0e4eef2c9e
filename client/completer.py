"""Completer for the interactive shell: command names and local paths for upload."""

from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from client.constants import COMMANDS


class ShelfCompleter(Completer):
    """
    Completes the command name for the first token, and file system paths
    for the argument of ``upload``. Option values are not completed.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        previous = tokens[-1] if is_typing_new_token else (tokens[-2] if len(tokens) > 1 else "")
        if current_word.startswith("--") or previous.startswith("--"):
            return

        yield from self._complete_paths(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str) -> Iterable[Completion]:
        """
        List entries of the directory named by ``partial`` whose names start
        with its last component. Directories get a trailing slash.
        """
        base = self.base_dir or Path.cwd()
        head, _, prefix = partial.rpartition("/")
        directory = base / head if head else base

        if not directory.is_dir():
            return

        entries = sorted(directory.iterdir(), key=lambda p: p.name)
        for entry in entries:
            if entry.name.startswith(".") and not prefix.startswith("."):
                continue
            if not entry.name.startswith(prefix):
                continue
            suffix = "/" if entry.is_dir() else ""
            candidate = f"{head}/{entry.name}{suffix}" if head else f"{entry.name}{suffix}"
            yield Completion(candidate, start_position=-len(partial))
