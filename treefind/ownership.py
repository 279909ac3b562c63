"""
Ownership resolution for treefind.

Maps the numeric uid/gid carried by an entry to a user or group name using
the system account databases (pwd/grp). Lookups are cached because a walk
asks about the same few ids over and over.
"""
from dataclasses import dataclass
from typing import Optional

from treefind.infrastructure.cache_manager import CacheConfig, LRUCache
from treefind.infrastructure.logger import get_logger

try:
    import grp
    import pwd
except ImportError:  # No account databases on Windows
    grp = pwd = None

_UNRESOLVED = object()


@dataclass(frozen=True)
class Identity:
    """A user or group: numeric id as text plus its name, if one resolves."""

    id: str
    name: Optional[str] = None

    def matches(self, wanted: str) -> bool:
        """Case-insensitive name match, falling back to the numeric id."""
        if self.name is not None and self.name.casefold() == wanted.casefold():
            return True
        return wanted == self.id


class OwnershipResolver:
    """Resolve uids and gids to names with an LRU/TTL cache."""

    def __init__(self, cache_config: Optional[CacheConfig] = None):
        self._users = LRUCache(cache_config)
        self._groups = LRUCache(cache_config)
        self.logger = get_logger()

    def user(self, uid: int) -> Identity:
        """Return the identity owning `uid`; name is None if unknown."""
        return Identity(id=str(uid), name=self._resolve(self._users, uid, _user_name))

    def group(self, gid: int) -> Identity:
        """Return the identity owning `gid`; name is None if unknown."""
        return Identity(id=str(gid), name=self._resolve(self._groups, gid, _group_name))

    def _resolve(self, cache: LRUCache, ident: int, lookup) -> Optional[str]:
        cached = cache.get(ident, _UNRESOLVED)
        if cached is not _UNRESOLVED:
            return cached

        name = lookup(ident)
        if name is None:
            self.logger.debug("id has no name in account database", id=ident)
        cache.set(ident, name)
        return name

    def clear(self) -> None:
        self._users.clear()
        self._groups.clear()


def _user_name(uid: int) -> Optional[str]:
    if pwd is None:
        return None
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


def _group_name(gid: int) -> Optional[str]:
    if grp is None:
        return None
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None
