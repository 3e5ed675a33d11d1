"""Constants used throughout termdeck."""


# Project data
DATA_DIR_NAME = ".termdeck"
CONFIG_FILE_NAME = "terminal_config.json"
ENV_PREFIX = "TERMDECK"

# Session defaults
DEFAULT_DIRECTORY = "~"
DEFAULT_TITLE_PREFIX = "Terminal"
DEFAULT_PROFILE_ID = "default"

# Built-in commands and their help text, in help order
BUILTIN_COMMANDS = {
    'help': 'Show available terminal commands',
    'open': 'Open a file in the editor',
    'edit': 'Open a file in the editor',
    'new-file': 'Create a new file in the editor',
    'new-tab': 'Open a new terminal tab',
    'preview': 'Preview a file in the browser',
    'clear': 'Clear terminal output',
    'pwd': 'Print working directory',
    'cd': 'Change working directory',
    'ls': 'List directory contents',
    'cat': 'Display file contents',
    'search': 'Search text in project files',
    'history': 'Show command history for this session',
}

# Terminal escape sequences
CLEAR_SCREEN = "\x1b[2J\x1b[H"
CRLF = "\r\n"

# Handler limits
DEFAULT_SEARCH_RESULTS = 50
MAX_CAT_BYTES = 1024 * 1024  # 1 MiB
SEARCH_SKIP_DIRS = {'.git', 'node_modules', '__pycache__', '.venv', 'venv', DATA_DIR_NAME}

# Timing labels
DISPATCH_TIMING_PREFIX = "command:"
