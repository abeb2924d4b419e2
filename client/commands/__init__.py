"""
Command handling for the input line: aliases, parsing, history and the
interpreter that ties them to the connection.
"""

from .alias_table import AliasTable, default_alias_table
from .history import CommandHistory, NavigationDirection
from .parser import CommandParser, parse, parse_command

__all__ = [
    "AliasTable",
    "CommandHistory",
    "CommandParser",
    "NavigationDirection",
    "default_alias_table",
    "parse",
    "parse_command",
]
