"""Client entry point."""

import os
import sys

from client.commands import execute
from client.constants import ERROR_PREFIXES, HELP_TEXT
from client.parser import ParseError, parse_args
from client.repl import repl_loop
from common.logging_config import setup_logging


def main() -> None:
    """Entry point for the client: one command from argv, or the shell."""
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('client', log_level=log_level)

    if not args:
        logger.info("Starting interactive shell")
        repl_loop()
        return

    try:
        command = parse_args(args)
    except ParseError as e:
        print(f"Error: {e}\n\n{HELP_TEXT}", file=sys.stderr)
        sys.exit(2)

    logger.info(f"Running command: {command.command}")
    output = execute(command)
    print(output)
    if output.startswith(ERROR_PREFIXES):
        sys.exit(1)


if __name__ == "__main__":
    main()
