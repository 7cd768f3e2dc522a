"""Paths that are never faulted."""

from typing import Iterable, Optional


class PathFilter:
    """Case-sensitive path blocklist.

    Exact paths are matched by set membership. Prefixes are optional and
    empty by default.
    """

    def __init__(self, paths: Optional[Iterable[str]] = None, prefixes: Iterable[str] = ()):
        self.paths = frozenset(paths or ())
        self.prefixes = tuple(prefixes)

    def is_blocked(self, path: Optional[str]) -> bool:
        if not path:
            return False
        if path in self.paths:
            return True
        return bool(self.prefixes) and path.startswith(self.prefixes)

    def __repr__(self):
        return f"PathFilter(paths={sorted(self.paths)!r}, prefixes={self.prefixes!r})"
