"""Tests for the find-by cache key encoder."""

import itertools
import re
from decimal import Decimal

import pytest

from find_cache.domain.exceptions import CacheKeyValueException
from find_cache.infrastructure.cache.keys import cache_key_for, storage_identifier
from tests.models import User

SAFE_KEY = re.compile(r"^(?:[a-z0-9._~/-]|%[0-9A-F]{2})+$", re.IGNORECASE)


def test_email_key_format() -> None:
    assert (
        cache_key_for("users", [("email", "a@example.com")])
        == "cache_find_by/users/email/a%40example.com"
    )


def test_pairs_sorted_by_field_name() -> None:
    key = cache_key_for("users", [("username", "bob"), ("tenant_id", 7)])
    assert key == "cache_find_by/users/tenant_id/7/username/bob"


def test_key_stable_under_permutation() -> None:
    pairs = [("b", "2"), ("a", 1), ("c", "x y"), ("d", 4.5)]
    keys = {cache_key_for("things", list(p)) for p in itertools.permutations(pairs)}
    assert len(keys) == 1


@pytest.mark.parametrize(
    "value",
    ["a/b", "a b", "ünïcødé", "%41", "?&=#", "\n\t", "..", "~_-.", "", "名前"],
)
def test_key_only_contains_safe_characters(value: str) -> None:
    key = cache_key_for("weird table/name", [("field name", value)])
    assert SAFE_KEY.match(key)


def test_separator_in_value_cannot_fake_extra_segments() -> None:
    one_field = cache_key_for("users", [("a", "1/b/2")])
    two_fields = cache_key_for("users", [("a", "1"), ("b", "2")])
    assert one_field != two_fields
    assert one_field.count("/") == 3


def test_numbers_use_canonical_decimal_string() -> None:
    assert cache_key_for("users", [("id", 42)]).endswith("/id/42")
    assert cache_key_for("users", [("score", 1.5)]).endswith("/score/1.5")
    assert cache_key_for("users", [("price", Decimal("9.90"))]).endswith("/price/9.90")


def test_number_and_numeric_string_share_a_key() -> None:
    """Values are compared as strings, matching how lookups by id arrive."""
    assert cache_key_for("users", [("id", 1)]) == cache_key_for("users", [("id", "1")])


@pytest.mark.parametrize("value", [None, True, ["x"], {"x": 1}, b"x"])
def test_non_scalar_value_fails_fast(value) -> None:
    with pytest.raises(CacheKeyValueException) as exc_info:
        cache_key_for("users", [("email", value)])
    assert exc_info.value.error_code == "CACHE_KEY_VALUE_ERROR"
    assert exc_info.value.details["field"] == "email"


def test_storage_identifier_of_mapped_class() -> None:
    assert storage_identifier(User) == "users"


def test_storage_identifier_of_plain_class() -> None:
    class Widget:
        __tablename__ = "widgets"

    assert storage_identifier(Widget) == "widgets"


def test_storage_identifier_missing_raises() -> None:
    class Nameless:
        pass

    with pytest.raises(AttributeError):
        storage_identifier(Nameless)
