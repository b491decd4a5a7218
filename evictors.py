# evictors.py
"""
Eviction policies for a full cache set.

The cache calls evict(entries, start, end) only when every entry in the
inclusive range [start, end] is valid. The returned index must lie in that
range. `entries` is the cache's whole entry list; a policy reads only its
range and must not keep a reference to it.
"""
from abc import ABC, abstractmethod

import numpy as np

from errors import ConfigurationError


class Evictor(ABC):

    @abstractmethod
    def evict(self, entries, start, end):
        """Return the index in [start, end] of the entry to overwrite."""

    def __repr__(self):
        return f"{type(self).__name__}()"


class LRUEvictor(Evictor):
    """Least recently used: smallest timestamp, lowest index on ties."""

    def evict(self, entries, start, end):
        victim = start
        oldest = entries[start].timestamp
        for i in range(start + 1, end + 1):
            ts = entries[i].timestamp
            if ts < oldest:
                victim = i
                oldest = ts
        return victim


class MRUEvictor(Evictor):
    """Most recently used: largest timestamp, lowest index on ties."""

    def evict(self, entries, start, end):
        victim = start
        newest = entries[start].timestamp
        for i in range(start + 1, end + 1):
            ts = entries[i].timestamp
            if ts > newest:
                victim = i
                newest = ts
        return victim


class RandomEvictor(Evictor):
    """Uniformly random victim within the set."""

    def __init__(self, seed=None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def evict(self, entries, start, end):
        return int(self.rng.integers(start, end + 1))

    def __repr__(self):
        return f"RandomEvictor(seed={self.seed!r})"


_POLICIES = {
    "lru": LRUEvictor,
    "mru": MRUEvictor,
    "random": RandomEvictor,
}


def make_evictor(name, seed=None):
    """Build an evictor from its config name ("lru", "mru" or "random")."""
    key = str(name).strip().lower()
    if key not in _POLICIES:
        raise ConfigurationError(
            f"Unknown eviction policy {name!r}; expected one of {sorted(_POLICIES)}"
        )
    if key == "random":
        return RandomEvictor(seed=seed)
    return _POLICIES[key]()


def available_policies():
    return sorted(_POLICIES)
