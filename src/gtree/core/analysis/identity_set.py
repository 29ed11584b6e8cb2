from __future__ import annotations

"""
Visited Directory Identity Set.

Tracks the (device, inode) identity of every directory entered during one
traversal so that symlink loops are detected by physical identity rather
than by path text.
"""

from typing import Iterator, Set

from gtree.domain.tree_models import Identity


class IdentitySet:
    """Append-only set of physical directory identities for one walk."""

    def __init__(self) -> None:
        self._seen: Set[Identity] = set()

    def register(self, identity: Identity) -> bool:
        """
        Insert an identity if it is new.

        Returns:
            bool: True if the identity was inserted, False if already present.
        """
        if identity in self._seen:
            return False
        self._seen.add(identity)
        return True

    def contains(self, identity: Identity) -> bool:
        return identity in self._seen

    def __contains__(self, identity: object) -> bool:
        return identity in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._seen)
