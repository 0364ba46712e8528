# FlexiSync Output Module
# Rich console output for run results

from flexisync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
