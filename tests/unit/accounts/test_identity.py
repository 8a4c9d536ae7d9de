"""Tests for login handle normalization and secret hashing."""

import hashlib

import pytest

from redbag_claimer.accounts.identity import (
    AccountIdentity,
    hash_secret,
    normalize_handle,
)


@pytest.mark.unit
class TestNormalizeHandle:
    """Handle normalization to +<country><number>."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("3001234567", "+573001234567"),
            ("+573001234567", "+573001234567"),
            ("573001234567", "+573001234567"),
            ("300 123 4567", "+573001234567"),
            ("(300) 123-4567", "+573001234567"),
            ("+57 300 123 4567", "+573001234567"),
        ],
    )
    def test_examples(self, raw: str, expected: str) -> None:
        assert normalize_handle(raw) == expected

    def test_short_number_starting_with_country_code_gets_prefix(self) -> None:
        # Too short to already include the country code
        assert normalize_handle("5712345") == "+575712345"

    def test_explicit_foreign_prefix_is_kept(self) -> None:
        assert normalize_handle("+1 555 010 0000") == "+15550100000"

    def test_custom_country_code(self) -> None:
        assert normalize_handle("5512345678", country_code="52") == "+525512345678"

    @pytest.mark.parametrize("raw", ["", None, "abc", "+", "  -  "])
    def test_no_digits_yields_empty(self, raw: str | None) -> None:
        assert normalize_handle(raw) == ""

    @pytest.mark.parametrize(
        "raw",
        ["3001234567", "573001234567", "+573001234567", "5712345", "12", "+1 555"],
    )
    def test_idempotent(self, raw: str) -> None:
        once = normalize_handle(raw)
        assert normalize_handle(once) == once


@pytest.mark.unit
class TestAccountIdentity:
    def test_from_config_normalizes_handle(self) -> None:
        identity = AccountIdentity.from_config("3001234567", "secret")
        assert identity.handle == "+573001234567"
        assert identity.secret == "secret"

    def test_hashed_secret_is_md5_hex(self) -> None:
        identity = AccountIdentity.from_config("3001234567", "secret")
        assert identity.hashed_secret == hashlib.md5(b"secret").hexdigest()
        assert hash_secret("secret") == identity.hashed_secret

    def test_repr_hides_secret(self) -> None:
        identity = AccountIdentity.from_config("3001234567", "hunter2")
        assert "hunter2" not in repr(identity)

    def test_is_immutable(self) -> None:
        identity = AccountIdentity.from_config("3001234567", "secret")
        with pytest.raises(AttributeError):
            identity.handle = "+570000000000"  # type: ignore[misc]
