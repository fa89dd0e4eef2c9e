"""Interactive shell on prompt_toolkit."""

import os
import sys
from typing import Callable, Dict, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from client.commands import execute
from client.completer import ShelfCompleter
from client.constants import HELP_TEXT, PROMPT_TEXT, STYLE, WELCOME_HELP, WELCOME_TITLE
from client.parser import ParseError, parse_command


class ExitShell(Exception):
    pass


def show_welcome() -> None:
    print(f"{WELCOME_TITLE}\n{WELCOME_HELP}")


def _clear() -> None:
    os.system("cls" if sys.platform == "win32" else "clear")
    show_welcome()


def _exit() -> None:
    raise ExitShell()


SHELL_COMMANDS: Dict[str, Callable[[], None]] = {
    "help": lambda: print(HELP_TEXT),
    "clear": _clear,
    "exit": _exit,
}


def run_line(user_input: str) -> str:
    """Parse and execute one shell line, returning what to print."""
    try:
        cmd_obj = parse_command(user_input)
    except ParseError as e:
        return f"Error: {e}"
    return execute(cmd_obj)


def repl_loop(session: Optional[PromptSession] = None) -> None:
    """Read lines until ``exit`` or end of input."""
    if session is None:
        session = PromptSession(completer=ShelfCompleter(), history=InMemoryHistory(), style=STYLE)

    show_welcome()

    while True:
        try:
            line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print()
            break

        if not line:
            continue

        builtin = SHELL_COMMANDS.get(line)
        if builtin is None:
            print(run_line(line))
            continue
        try:
            builtin()
        except ExitShell:
            break

    print("Goodbye!")
