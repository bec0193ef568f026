import re
from typing import Dict, List, Tuple

_INVALID_CHARS = re.compile(r"[^0-9a-zA-Z]")


def sanitize_identifier(filename: str) -> str:
    """Replace every character that is not an ASCII letter or digit with `_`."""
    return _INVALID_CHARS.sub("_", filename)


class IdentifierAllocator:
    """
    Tracks which source filename claimed each identifier during a build.

    Two filenames that differ only in punctuation sanitize to the same
    identifier. By default the collision is only recorded; with `unique`
    set, later claimants get a numeric suffix (`_2`, `_3`, ...), which
    changes the emitted symbol names.
    """

    def __init__(self, unique: bool = False):
        self.unique = unique
        self._owners: Dict[str, str] = {}
        self.collisions: List[Tuple[str, str, str]] = []

    def allocate(self, filename: str) -> str:
        identifier = sanitize_identifier(filename)
        owner = self._owners.setdefault(identifier, filename)
        if owner == filename:
            return identifier

        collision = (identifier, owner, filename)
        if collision not in self.collisions:
            self.collisions.append(collision)
        if not self.unique:
            return identifier

        n = 2
        candidate = f"{identifier}_{n}"
        while self._owners.setdefault(candidate, filename) != filename:
            n += 1
            candidate = f"{identifier}_{n}"
        return candidate
