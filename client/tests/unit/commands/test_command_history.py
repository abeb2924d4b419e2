"""
Unit tests for command history.
"""

import pytest

from client.commands.history import HISTORY_CAPACITY, NOT_BROWSING, CommandHistory, NavigationDirection

OLDER = NavigationDirection.OLDER
NEWER = NavigationDirection.NEWER


@pytest.fixture
def history():
    h = CommandHistory()
    for line in ("look", "get all", "n"):
        h.record(line)
    return h


def test_record_puts_most_recent_first(history):
    """Test entries are ordered newest first."""
    assert history.entries == ("n", "get all", "look")
    assert history.cursor == NOT_BROWSING


def test_blank_lines_not_recorded():
    """Test empty and whitespace-only lines are ignored."""
    h = CommandHistory()
    h.record("")
    h.record("   ")
    assert len(h) == 0


def test_capacity_evicts_oldest():
    """Test only the last HISTORY_CAPACITY lines are kept."""
    h = CommandHistory()
    for i in range(HISTORY_CAPACITY + 3):
        h.record(f"cmd{i}")
    assert len(h) == HISTORY_CAPACITY
    assert h.entries[0] == f"cmd{HISTORY_CAPACITY + 2}"
    assert "cmd0" not in h.entries


def test_navigate_older_walks_back(history):
    """Test Up walks from newest to oldest and stops there."""
    assert history.navigate(OLDER) == "n"
    assert history.navigate(OLDER) == "get all"
    assert history.navigate(OLDER) == "look"
    assert history.navigate(OLDER) == "look"
    assert history.cursor == 2


def test_navigate_newer_returns_to_fresh_line(history):
    """Test Down walks forward and ends at the empty fresh line."""
    history.navigate(OLDER)
    history.navigate(OLDER)
    assert history.navigate(NEWER) == "n"
    assert history.navigate(NEWER) == ""
    assert history.navigate(NEWER) == ""
    assert history.cursor == NOT_BROWSING


def test_navigate_empty_history():
    """Test navigation on an empty history yields the fresh line."""
    h = CommandHistory()
    assert h.navigate(OLDER) == ""
    assert h.cursor == NOT_BROWSING


def test_record_resets_cursor(history):
    """Test submitting while browsing resets the cursor."""
    history.navigate(OLDER)
    history.navigate(OLDER)
    history.record("score")
    assert history.cursor == NOT_BROWSING
    assert history.navigate(OLDER) == "score"


def test_invalid_capacity():
    with pytest.raises(ValueError):
        CommandHistory(capacity=0)
