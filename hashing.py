# hashing.py
"""
Hash generators map a key to the integer tag used to pick its set.

A generator must be deterministic within one run of the program: equal
keys give equal tags. Tags may be negative; the cache folds them into range.
"""
from abc import ABC, abstractmethod


class HashGenerator(ABC):

    @abstractmethod
    def hash(self, key):
        """Return the integer tag for `key`."""


class GenericHashGenerator(HashGenerator):
    """Default: the key type's own __hash__."""

    def hash(self, key):
        return hash(key)


class KeyFuncHashGenerator(HashGenerator):
    """
    Tag keys with an arbitrary callable.
    Handy when the interesting part of a key is cheaper to hash than the whole object.
    """

    def __init__(self, func):
        if not callable(func):
            raise TypeError("func must be callable")
        self.func = func

    def hash(self, key):
        return self.func(key)


class AttributeHashGenerator(HashGenerator):
    """
    Tag keys by one of their attributes, e.g. an `id` field.
    Integer attributes are used as the tag directly, anything else goes through hash().
    """

    def __init__(self, attr="id"):
        self.attr = attr

    def hash(self, key):
        value = getattr(key, self.attr)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return hash(value)

    def __repr__(self):
        return f"AttributeHashGenerator(attr={self.attr!r})"
