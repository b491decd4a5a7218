"""
Tests for the hash generators.

Run with: pytest tests/test_hashing.py -v
"""

import pytest

from hashing import AttributeHashGenerator, GenericHashGenerator, KeyFuncHashGenerator


class Employee:
    def __init__(self, id, ssn):
        self.id = id
        self.ssn = ssn


class TestGenericHashGenerator:
    """Tests for the default built-in hash strategy."""

    def test_matches_builtin_hash(self):
        """Delegates to hash()."""
        gen = GenericHashGenerator()

        assert gen.hash("key") == hash("key")
        assert gen.hash(42) == 42

    def test_equal_keys_equal_tags(self):
        """Equal keys give equal tags."""
        gen = GenericHashGenerator()

        assert gen.hash((1, "a")) == gen.hash((1, "a"))


class TestKeyFuncHashGenerator:
    """Tests for the callable-based strategy."""

    def test_uses_callable(self):
        """The callable's result is the tag."""
        gen = KeyFuncHashGenerator(len)

        assert gen.hash("abcd") == 4

    def test_rejects_non_callable(self):
        """A non-callable is refused up front."""
        with pytest.raises(TypeError):
            KeyFuncHashGenerator(5)


class TestAttributeHashGenerator:
    """Tests for hashing by a single attribute."""

    def test_integer_attribute_used_directly(self):
        """Integer ids are the tag as-is."""
        gen = AttributeHashGenerator("id")

        assert gen.hash(Employee(17, "123-45-6789")) == 17

    def test_other_attribute_hashed(self):
        """Non-integer attributes go through hash()."""
        gen = AttributeHashGenerator("ssn")

        assert gen.hash(Employee(1, "123-45-6789")) == hash("123-45-6789")

    def test_swapping_key_field(self):
        """Switching the attribute changes the tag without touching the key."""
        emp = Employee(3, "999-00-1111")

        assert AttributeHashGenerator("id").hash(emp) != AttributeHashGenerator("ssn").hash(emp)

    def test_missing_attribute(self):
        """Keys without the attribute raise AttributeError."""
        with pytest.raises(AttributeError):
            AttributeHashGenerator("id").hash("plain string")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
