# cache.py
"""
Set-associative key -> value cache.

Keys are hashed to a tag, the tag picks one contiguous set of `lines_per_set`
slots, and lookups only ever scan that set. When a set is full the configured
evictor picks which slot to overwrite. All slots are allocated up front.

Not thread-safe: callers sharing a cache between threads must hold their own lock.
"""
import itertools
import logging
import operator
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from errors import ConfigurationError, ContractViolationError
from evictors import Evictor, LRUEvictor
from hashing import GenericHashGenerator, HashGenerator

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 32 * 1024 * 1024
DEFAULT_LINES_PER_SET = 4


@dataclass(slots=True)
class CacheEntry:
    """
    One slot. `key` and `value` mean nothing while `valid` is False.
    `timestamp` is the clock reading at the last write or read hit.
    """
    key: Any = None
    value: Any = None
    valid: bool = False
    timestamp: int = 0

    def update(self, key, value, timestamp):
        # Also used to overwrite an evicted slot, so the key is replaced too.
        self.key = key
        self.value = value
        self.timestamp = timestamp
        self.valid = True

    def touch(self, timestamp):
        self.timestamp = timestamp


def _check_size(name, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")


def _logical_clock():
    return itertools.count(1).__next__


@dataclass
class CacheConfig:
    """
    Construction options. Every field is optional; resolve() fills in defaults
    and validates the geometry.

    capacity: total slot count, None or 0 means DEFAULT_CAPACITY
    lines_per_set: slots per set, None or 0 means DEFAULT_LINES_PER_SET
    evictor: victim selection for full sets, defaults to LRU
    hash_generator: key -> tag, defaults to the built-in hash()
    clock: zero-arg callable returning non-decreasing ints, defaults to a
        per-cache logical counter
    """
    capacity: Optional[int] = None
    lines_per_set: Optional[int] = None
    evictor: Optional[Evictor] = None
    hash_generator: Optional[HashGenerator] = None
    clock: Optional[Callable[[], int]] = None

    def resolve(self):
        """Return a copy with all defaults applied. Raises ConfigurationError."""
        capacity = self.capacity
        if capacity is None or capacity == 0:
            logger.debug("No cache size specified, using %d entries.", DEFAULT_CAPACITY)
            capacity = DEFAULT_CAPACITY
        _check_size("capacity", capacity)

        lines_per_set = self.lines_per_set
        if lines_per_set is None or lines_per_set == 0:
            logger.debug("No set size specified, using %d lines per set.", DEFAULT_LINES_PER_SET)
            lines_per_set = DEFAULT_LINES_PER_SET
        _check_size("lines_per_set", lines_per_set)

        if capacity % lines_per_set != 0:
            raise ConfigurationError(
                f"capacity ({capacity}) must be a multiple of lines_per_set ({lines_per_set})"
            )

        evictor = self.evictor
        if evictor is None:
            logger.debug("No evictor specified, using LRU.")
            evictor = LRUEvictor()
        elif not callable(getattr(evictor, "evict", None)):
            raise ConfigurationError(f"evictor {evictor!r} has no evict() method")

        hash_generator = self.hash_generator
        if hash_generator is None:
            logger.debug(
                "No hash generator specified, using hash(). "
                "Mutable key types may not cache properly with it."
            )
            hash_generator = GenericHashGenerator()
        elif not callable(getattr(hash_generator, "hash", None)):
            raise ConfigurationError(f"hash generator {hash_generator!r} has no hash() method")

        clock = self.clock
        if clock is None:
            clock = _logical_clock()
        elif not callable(clock):
            raise ConfigurationError("clock must be callable")

        return replace(
            self,
            capacity=capacity,
            lines_per_set=lines_per_set,
            evictor=evictor,
            hash_generator=hash_generator,
            clock=clock,
        )


class SetAssociativeCache:
    """
    N-way set-associative cache.

    Example:
        cache = SetAssociativeCache(capacity=4, lines_per_set=2)
        cache.put(0, "a")
        cache.get(0)   # "a"
        cache.get(2)   # None, counted as a miss
    """

    def __init__(self, capacity=None, lines_per_set=None, evictor=None,
                 hash_generator=None, *, clock=None):
        config = CacheConfig(
            capacity=capacity,
            lines_per_set=lines_per_set,
            evictor=evictor,
            hash_generator=hash_generator,
            clock=clock,
        ).resolve()

        self._capacity = config.capacity
        self._lines_per_set = config.lines_per_set
        self._set_count = self._capacity // self._lines_per_set
        self.evictor = config.evictor
        self.hash_generator = config.hash_generator
        self._clock = config.clock

        self.clear_stats()

        # Pre-allocate every slot; nothing is allocated after this.
        self._entries = [CacheEntry() for _ in range(self._capacity)]

    @classmethod
    def from_config(cls, config: CacheConfig):
        return cls(
            capacity=config.capacity,
            lines_per_set=config.lines_per_set,
            evictor=config.evictor,
            hash_generator=config.hash_generator,
            clock=config.clock,
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def lines_per_set(self) -> int:
        return self._lines_per_set

    @property
    def set_count(self) -> int:
        return self._set_count

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def evictions(self) -> int:
        return self._evictions

    @property
    def hit_rate(self) -> float:
        lookups = self._hits + self._misses
        return self._hits / lookups if lookups else 0.0

    def _tag(self, key):
        tag = self.hash_generator.hash(key)
        if isinstance(tag, bool):
            raise ContractViolationError(f"Hash generator returned a bool tag for {key!r}")
        try:
            return operator.index(tag)
        except TypeError:
            raise ContractViolationError(
                f"Hash generator must return an integer tag, got {type(tag).__name__}"
            ) from None

    def calculate_block_range(self, tag):
        """
        Map a tag to the inclusive slot range [start, end] of its set.
        Keys are arbitrary, so the tag is simply folded into the available
        sets; there is no backing address range behind a set.
        """
        # Python's % takes the divisor's sign, so negative tags land in [0, capacity).
        normalized = tag % self._capacity
        start = normalized - normalized % self._lines_per_set
        end = start + self._lines_per_set - 1
        return start, end

    def get(self, key, default=None):
        """
        Return the cached value for `key`, or `default` on a miss.
        A hit refreshes the entry's timestamp; a miss touches nothing.
        """
        start, end = self.calculate_block_range(self._tag(key))

        for i in range(start, end + 1):
            entry = self._entries[i]
            if entry.valid and entry.key == key:
                self._hits += 1
                entry.touch(self._clock())
                return entry.value

        # No backing store: the caller decides what to do with a miss.
        self._misses += 1
        return default

    def put(self, key, value):
        """
        Store `value` under `key`. An existing key is updated in place,
        otherwise the first free slot in the set is used, otherwise the
        evictor picks a victim.
        """
        start, end = self.calculate_block_range(self._tag(key))

        target = None
        for i in range(start, end + 1):
            entry = self._entries[i]
            if entry.valid:
                if entry.key == key:
                    entry.value = value
                    entry.touch(self._clock())
                    return
            elif target is None:
                target = i

        if target is None:
            self._evictions += 1
            target = self._evict(start, end)

        self._entries[target].update(key, value, self._clock())

    def _evict(self, start, end):
        victim = self.evictor.evict(self._entries, start, end)
        if isinstance(victim, bool):
            raise ContractViolationError(f"{self.evictor!r} returned a bool index")
        try:
            victim = operator.index(victim)
        except TypeError:
            raise ContractViolationError(
                f"{self.evictor!r} must return an integer index, got {type(victim).__name__}"
            ) from None
        if not start <= victim <= end:
            raise ContractViolationError(
                f"{self.evictor!r} returned index {victim}, outside set range [{start}, {end}]"
            )
        logger.debug("Evicting slot %d from set [%d, %d]", victim, start, end)
        return victim

    def clear_stats(self):
        """Reset hit/miss/eviction counters. Entries are left alone."""
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def stats(self):
        used_lines = sum(1 for e in self._entries if e.valid)
        return {
            "capacity": self._capacity,
            "lines_per_set": self._lines_per_set,
            "set_count": self._set_count,
            "used_lines": used_lines,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": self.hit_rate,
        }

    def __repr__(self):
        return (
            f"SetAssociativeCache(capacity={self._capacity}, "
            f"lines_per_set={self._lines_per_set}, "
            f"evictor={self.evictor!r})"
        )
