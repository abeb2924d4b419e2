"""
Alias table for player input.

Maps the literal first word a player types onto a canonical verb. Lookup is
case-insensitive and exact: "att" resolves to ATTACK, "atta" does not.
Unknown words come back unchanged so free-text verbs such as social emotes
still reach the server.

The table is built once and exposed through a read-only mapping.
"""

from collections.abc import Mapping
from types import MappingProxyType

from ..logging_config import get_logger
from ..models.command import Direction, Verb

logger = get_logger(__name__)


DEFAULT_VERB_ALIASES: dict[Verb, tuple[str, ...]] = {
    Verb.ATTACK: ("attack", "att", "a", "kill", "k"),
    Verb.DROP: ("drop",),
    Verb.GET: ("get", "grab", "gra", "take", "tak"),
    Verb.PUT: ("put", "place"),
    Verb.LOOT: ("loot",),
    Verb.INVENTORY: ("inventory", "inv", "i"),
    Verb.LOOK: ("look", "loo", "l"),
    Verb.TELL: ("tell",),
    Verb.GO: ("go", "move"),
    Verb.MEDITATE: ("meditate", "med"),
    Verb.SIT: ("sit", "si"),
    Verb.SLEEP: ("sleep", "sle"),
    Verb.STAND: ("stand", "sta", "st"),
    Verb.STOP: ("stop", "sto"),
    Verb.WAKE: ("wake", "wak", "wa"),
    Verb.AUTOLOOT: ("autoloot",),
    Verb.SCORE: ("score", "sco", "sc"),
    Verb.FLEE: ("flee", "run"),
    Verb.SAVE: ("save",),
    Verb.QUIT: ("quit", "logout"),
    Verb.CLEAR: ("clear", "cls", "clr"),
    Verb.RECONNECT: ("reconnect",),
}

DEFAULT_DIRECTION_ALIASES: dict[Direction, tuple[str, ...]] = {
    Direction.NORTH: ("n", "north"),
    Direction.EAST: ("e", "east"),
    Direction.WEST: ("w", "west"),
    Direction.SOUTH: ("s", "south"),
    Direction.UP: ("u", "up"),
    Direction.DOWN: ("d", "down"),
}


def _invert(aliases: Mapping[str, tuple[str, ...]], table_name: str) -> dict[str, str]:
    """Flatten canonical -> tokens into token -> canonical, rejecting clashes."""
    flat: dict[str, str] = {}
    for canonical, tokens in aliases.items():
        for token in tokens:
            key = token.lower()
            existing = flat.get(key)
            if existing is not None and existing != canonical:
                raise ValueError(
                    f"Alias '{token}' in {table_name} maps to both '{existing}' and '{canonical}'"
                )
            flat[key] = canonical
    return flat


class AliasTable:
    """
    Read-only token -> canonical verb lookup.

    Direction tokens are kept in their own table: they resolve to Verb.MOVE
    here and to a concrete Direction through resolve_direction().
    """

    def __init__(
        self,
        verb_aliases: Mapping[Verb, tuple[str, ...]] | None = None,
        direction_aliases: Mapping[Direction, tuple[str, ...]] | None = None,
    ) -> None:
        verbs = _invert(verb_aliases or DEFAULT_VERB_ALIASES, "verb aliases")
        directions = _invert(direction_aliases or DEFAULT_DIRECTION_ALIASES, "direction aliases")

        overlap = set(verbs) & set(directions)
        if overlap:
            raise ValueError(f"Tokens used for both verbs and directions: {sorted(overlap)}")

        self._verbs: Mapping[str, Verb] = MappingProxyType({token: Verb(v) for token, v in verbs.items()})
        self._directions: Mapping[str, Direction] = MappingProxyType(
            {token: Direction(d) for token, d in directions.items()}
        )

        logger.debug(
            "Alias table built",
            verb_aliases=len(self._verbs),
            direction_aliases=len(self._directions),
        )

    def resolve(self, token: str) -> Verb | str:
        """
        Resolve a token to its canonical verb.

        Args:
            token: The word as typed

        Returns:
            The canonical Verb, or the token unchanged when it is not an alias
        """
        key = token.lower()
        if key in self._directions:
            return Verb.MOVE
        return self._verbs.get(key, token)

    def resolve_direction(self, token: str) -> Direction | None:
        """Return the direction a token names, or None."""
        return self._directions.get(token.lower())

    def is_alias(self, token: str) -> bool:
        """Check whether a token is a known verb or direction alias."""
        key = token.lower()
        return key in self._verbs or key in self._directions

    def aliases_for(self, verb: Verb) -> list[str]:
        """List the tokens that resolve to a verb."""
        if verb == Verb.MOVE:
            return sorted(self._directions)
        return sorted(token for token, canonical in self._verbs.items() if canonical == verb)

    @property
    def verbs(self) -> Mapping[str, Verb]:
        """Read-only view of token -> verb."""
        return self._verbs

    @property
    def directions(self) -> Mapping[str, Direction]:
        """Read-only view of token -> direction."""
        return self._directions


# Process-wide table, built once at import
default_alias_table = AliasTable()


def resolve(token: str) -> Verb | str:
    """Resolve a token with the process-wide alias table."""
    return default_alias_table.resolve(token)
