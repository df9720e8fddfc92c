# autofix/cli/commands: Command modules for the AutoFix CLI.
#
# Each module in this package provides one or more CLI commands.

from .config_cmd import config_app
from .run import run
from .setup import setup

__all__ = [
    "config_app",
    "run",
    "setup",
]
