"""
Command parser for the MUD client.

Turns a tokenized line of player input into a Command (action identifier plus
ordered arguments) or a ParseFailure. Parsing is pure: no network I/O and no
state changes, so the same tokens always produce the same result.

Supported shapes for the item verbs (get, drop, put, loot):

    get sword              single item (multi-word names allowed)
    get all                everything
    get all bag            everything from a container
    get all.sword          every item of one kind
    get all.sword bag      every item of one kind from a container

Anything outside the documented shapes fails closed with UNRECOGNIZED_FORM
rather than guessing what the player meant.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass

from ..logging_config import get_logger
from ..models.command import (
    ActionId,
    Command,
    LocalAction,
    ParseFailure,
    ParseFailureReason,
    Verb,
)
from .alias_table import AliasTable, default_alias_table
from .command_input import tokenize

logger = get_logger(__name__)

ALL_MARKER = "all"
ALL_SPECIFIC_PREFIX = "all."


@dataclass(frozen=True)
class QuantifierForms:
    """
    Actions an item verb supports for each quantifier shape.

    None marks a shape the verb does not accept.
    """

    single: ActionId
    all_items: ActionId | None = None
    all_from_container: ActionId | None = None
    all_specific: ActionId | None = None
    all_specific_from_container: ActionId | None = None


QUANTIFIER_FORMS: dict[Verb, QuantifierForms] = {
    Verb.GET: QuantifierForms(
        single=ActionId.GET_SINGLE,
        all_items=ActionId.GET_ALL,
        all_from_container=ActionId.GET_ALL_FROM_CONTAINER,
        all_specific=ActionId.GET_ALL_SPECIFIC,
        all_specific_from_container=ActionId.GET_ALL_SPECIFIC_FROM_CONTAINER,
    ),
    Verb.DROP: QuantifierForms(
        single=ActionId.DROP_SINGLE,
        all_items=ActionId.DROP_ALL,
        all_specific=ActionId.DROP_ALL_SPECIFIC,
    ),
    # put has no separate "from container" ids; the container rides along as a trailing argument
    Verb.PUT: QuantifierForms(
        single=ActionId.PUT_SINGLE,
        all_items=ActionId.PUT_ALL,
        all_from_container=ActionId.PUT_ALL,
        all_specific=ActionId.PUT_ALL_SPECIFIC,
        all_specific_from_container=ActionId.PUT_ALL_SPECIFIC,
    ),
    Verb.LOOT: QuantifierForms(
        single=ActionId.LOOT_SINGLE,
        all_items=ActionId.LOOT_ALL,
    ),
}

BARE_VERB_ACTIONS: dict[Verb, str] = {
    Verb.INVENTORY: ActionId.SHOW_INVENTORY,
    Verb.MEDITATE: ActionId.MEDITATE,
    Verb.SIT: ActionId.SIT,
    Verb.SLEEP: ActionId.SLEEP,
    Verb.STAND: ActionId.STAND,
    Verb.STOP: ActionId.STOP,
    Verb.WAKE: ActionId.WAKE,
    Verb.AUTOLOOT: ActionId.TOGGLE_AUTOLOOT,
    Verb.SCORE: ActionId.SHOW_SCORE,
    Verb.FLEE: ActionId.FLEE,
    Verb.SAVE: ActionId.SAVE_PLAYER,
    Verb.QUIT: LocalAction.LOGOUT,
    Verb.CLEAR: LocalAction.CLEAR_SCREEN,
    Verb.RECONNECT: LocalAction.RECONNECT,
}


def _is_all_marker(token: str) -> bool:
    return token.lower() == ALL_MARKER


def _is_all_specific(token: str) -> bool:
    return token.lower().startswith(ALL_SPECIFIC_PREFIX)


class CommandParser:
    """
    Grammar-driven parser from tokens to commands.

    Dispatches on the canonical verb the alias table resolves the first token
    to; each verb family has its own creation method.
    """

    def __init__(self, alias_table: AliasTable | None = None) -> None:
        self.alias_table = alias_table or default_alias_table

        self._command_factory = {
            Verb.MOVE: self._create_move_command,
            Verb.GO: self._create_go_command,
            Verb.ATTACK: self._create_attack_command,
            Verb.LOOK: self._create_look_command,
        }

    def parse(self, tokens: Sequence[str], roster: Collection[str] | None = None) -> Command | ParseFailure:
        """
        Parse a tokenized line.

        Args:
            tokens: Whitespace-delimited tokens of one input line
            roster: Names of connected players, consulted only by "tell".
                When None the first word after "tell" is always treated as
                a player name and the server decides.

        Returns:
            The resolved Command, or a ParseFailure describing why not
        """
        tokens = tuple(tokens)
        if not tokens:
            return self._fail(ParseFailureReason.EMPTY, tokens)

        head, args = tokens[0], tokens[1:]
        verb = self.alias_table.resolve(head)

        if not isinstance(verb, Verb):
            # Free-text verb (emotes and the like): the server decides what it means
            result: Command | ParseFailure = Command(action=head, args=list(args))
        elif verb in QUANTIFIER_FORMS:
            result = self._create_quantified_command(QUANTIFIER_FORMS[verb], args, tokens)
        elif verb in BARE_VERB_ACTIONS:
            result = self._create_bare_command(BARE_VERB_ACTIONS[verb], args, tokens)
        elif verb == Verb.TELL:
            result = self._create_tell_command(args, tokens, roster)
        else:
            result = self._command_factory[verb](head, args, tokens)

        if isinstance(result, Command):
            logger.debug("Command parsed", action=result.action, args=result.args)
        return result

    def _fail(self, reason: ParseFailureReason, tokens: Sequence[str]) -> ParseFailure:
        logger.debug("Command parse failed", reason=reason.value, tokens=list(tokens))
        return ParseFailure(reason=reason, tokens=list(tokens))

    def _create_bare_command(self, action: str, args: Sequence[str], tokens: Sequence[str]) -> Command | ParseFailure:
        """Zero-argument verbs; any trailing word is an error."""
        if args:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        return Command(action=action, args=[])

    def _create_move_command(self, head: str, args: Sequence[str], tokens: Sequence[str]) -> Command | ParseFailure:
        """Single-token movement: n, e, w, s, u, d and their long forms."""
        direction = self.alias_table.resolve_direction(head)
        if args or direction is None:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        return Command(action=ActionId.MOVE, args=[direction.value])

    def _create_go_command(self, head: str, args: Sequence[str], tokens: Sequence[str]) -> Command | ParseFailure:
        """go <direction>."""
        if len(args) != 1:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        direction = self.alias_table.resolve_direction(args[0])
        if direction is None:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        return Command(action=ActionId.MOVE, args=[direction.value])

    def _create_attack_command(self, head: str, args: Sequence[str], tokens: Sequence[str]) -> Command:
        """attack [target]; without a target the server picks the current opponent."""
        if not args:
            return Command(action=ActionId.ATTACK, args=[])
        return Command(action=ActionId.ATTACK, args=[" ".join(args)])

    def _create_look_command(self, head: str, args: Sequence[str], tokens: Sequence[str]) -> Command | ParseFailure:
        """
        Create a look command.

        Handles:
        1. 'look' - describe the current location
        2. 'look sword' - look at an item
        3. 'look at guard' - look at an NPC or item
        4. 'look in backpack' - look inside a container
        """
        if not args:
            return Command(action=ActionId.DESCRIBE_LOCATION, args=[])

        keyword = args[0].lower()
        if keyword in ("at", "in"):
            target = args[1:]
            if not target:
                return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
            action = ActionId.LOOK_AT if keyword == "at" else ActionId.LOOK_IN
            return Command(action=action, args=[" ".join(target)])

        return Command(action=ActionId.LOOK_AT_ITEM, args=[" ".join(args)])

    def _create_tell_command(
        self,
        args: Sequence[str],
        tokens: Sequence[str],
        roster: Collection[str] | None,
    ) -> Command | ParseFailure:
        """
        Create a tell command.

        'tell all <message>' broadcasts to everyone. Otherwise the first word
        is a player name when the roster knows it (or when there is no roster
        to ask); a roster miss turns the whole remainder into a message to
        the room.
        """
        if not args:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)

        if _is_all_marker(args[0]):
            message = args[1:]
            if not message:
                return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
            return Command(action=ActionId.TELL_ALL, args=[" ".join(message)])

        candidate, message = args[0], args[1:]
        if roster is not None:
            known = {name.lower(): name for name in roster}
            if candidate.lower() not in known:
                return Command(action=ActionId.TELL_ROOM, args=[" ".join(args)])
            candidate = known[candidate.lower()]

        if not message:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        return Command(action=ActionId.TELL_PLAYER, args=[candidate, " ".join(message)])

    def _create_quantified_command(
        self,
        forms: QuantifierForms,
        args: Sequence[str],
        tokens: Sequence[str],
    ) -> Command | ParseFailure:
        """
        Resolve get/drop/put/loot by the position and count of their tokens.

        A container is only ever the single token following an "all" or
        "all.<item>" marker; longer tails are ambiguous and rejected.
        """
        if not args:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)

        marker, tail = args[0], args[1:]

        if _is_all_marker(marker):
            if not tail:
                return self._build(forms.all_items, [], tokens)
            if len(tail) == 1 and not (_is_all_marker(tail[0]) or _is_all_specific(tail[0])):
                return self._build(forms.all_from_container, [tail[0]], tokens)
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)

        if _is_all_specific(marker):
            item = marker[len(ALL_SPECIFIC_PREFIX) :]
            if not item:
                return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
            if not tail:
                return self._build(forms.all_specific, [item], tokens)
            if len(tail) == 1:
                return self._build(forms.all_specific_from_container, [item, tail[0]], tokens)
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)

        return self._build(forms.single, [" ".join(args)], tokens)

    def _build(self, action: ActionId | None, args: list[str], tokens: Sequence[str]) -> Command | ParseFailure:
        if action is None:
            return self._fail(ParseFailureReason.UNRECOGNIZED_FORM, tokens)
        return Command(action=action, args=args)


# Process-wide parser over the default alias table
command_parser = CommandParser()


def parse(tokens: Sequence[str], roster: Collection[str] | None = None) -> Command | ParseFailure:
    """Parse tokens with the process-wide parser."""
    return command_parser.parse(tokens, roster)


def parse_command(line: str, roster: Collection[str] | None = None) -> Command | ParseFailure:
    """Tokenize and parse one raw input line."""
    return command_parser.parse(tokenize(line), roster)
