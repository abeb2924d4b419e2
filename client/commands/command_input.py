"""
Command input utilities.

Cleans and tokenizes the raw line a player typed before it reaches the
parser. Tokens are kept exactly as typed, leading slashes included, and
there is no length limit.
"""

import re

from ..logging_config import get_logger

logger = get_logger(__name__)


def clean_command_input(command: str) -> str:
    """Clean and normalize command input by collapsing multiple spaces and stripping whitespace."""
    cleaned = re.sub(r"\s+", " ", command).strip()
    if cleaned != command:
        logger.debug("Command input cleaned")
    return cleaned


def tokenize(line: str) -> tuple[str, ...]:
    """
    Split one line of input into whitespace-delimited tokens.

    Returns:
        Immutable tuple of tokens; empty for blank input
    """
    return tuple(clean_command_input(line).split())
