# OWSYNC Output Module
# Rich console output

from owsync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
