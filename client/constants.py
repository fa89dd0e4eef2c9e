"""Client constants."""

from pathlib import Path

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "view", "share", "group", "help", "clear", "exit"]

STYLE = Style.from_dict(
    {
        "prompt": "#2E9E6B bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[92m"
RESET = "\033[0m"

DEFAULT_CONFIG_PATH = Path.home() / '.assetshelf' / 'config.json'

WELCOME_TITLE = f"{GREEN}AssetShelf{RESET} - uploads to release assets"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"
PROMPT_TEXT = "shelf> "

HELP_TEXT = """Usage: assetshelf <command> [arguments]
       assetshelf            (no arguments starts an interactive shell)

Commands:
  upload <path> [--to <upload-url>] [--password <pw>] [--mime <type>] [--id <file-id>]
                                      Upload a file (chunked above the size threshold)
  view <id>[,<id>...] [--password <pw>]
                                      Show files for file ids or a view/group id
  share <file-id>... [--password <pw>]
                                      Create a short share link for files
  group <group-id> <file-id>... [--password <pw>]
                                      Create a named group of files
  help                                Show this help
  clear, exit                         Shell only

Examples:
  upload media/holiday.mp4 --password secret
  view f_1a2b3c4d5e6f,f_0a9b8c7d6e5f
  share f_1a2b3c4d5e6f f_0a9b8c7d6e5f
  group album-2024 f_1a2b3c4d5e6f f_0a9b8c7d6e5f"""

ERROR_PREFIXES = ("Error:", "Upload failed:", "Lookup failed:", "Share failed:", "Group creation failed:")
