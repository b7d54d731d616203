"""Tests for entry and topic field validators.

Covers presence-before-format ordering, Telegram strict/lenient modes, EIP-55
checksum handling, the optional Discord field and aggregate error mapping.
"""

import pytest

from topicbox.services.validators import (
    normalize_telegram_username,
    normalize_wallet_address,
    validate_discord_username,
    validate_email,
    validate_entry_fields,
    validate_platform_username,
    validate_telegram_username,
    validate_topic_fields,
    validate_wallet_address,
)

CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class TestTelegramUsername:
    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_is_required(self, value):
        assert validate_telegram_username(value) == "Telegram username is required"

    def test_strict_mode_requires_at(self):
        assert validate_telegram_username("alice") == "Telegram username must start with '@'"

    def test_strict_mode_rejects_invalid_characters(self):
        reason = validate_telegram_username("@ali-ce")
        assert reason is not None
        assert "letters, numbers, and underscores" in reason

    def test_length_excludes_at_sign(self):
        assert validate_telegram_username("@" + "a" * 32) is None
        assert validate_telegram_username("@" + "a" * 33) == "Telegram username is too long"

    def test_lenient_mode_accepts_missing_at(self):
        assert validate_telegram_username("alice_01", require_at=False) is None
        assert validate_telegram_username("@alice_01", require_at=False) is None

    def test_lenient_mode_still_checks_pattern(self):
        assert validate_telegram_username("@@alice", require_at=False) is not None

    def test_normalization_adds_at(self):
        assert normalize_telegram_username("alice") == "@alice"
        assert normalize_telegram_username("@alice") == "@alice"


class TestPlatformUsername:
    def test_valid(self):
        assert validate_platform_username("alice.dev") is None
        assert validate_platform_username("a_b") is None

    def test_missing(self):
        assert validate_platform_username("") == "Platform username is required"

    @pytest.mark.parametrize("value", ["ab", "a" * 21])
    def test_length_bounds(self, value):
        assert "between 3 and 20" in validate_platform_username(value)

    def test_leading_digit(self):
        assert validate_platform_username("1alice") == "Platform username cannot start with a number"

    def test_special_characters(self):
        assert "letters, numbers" in validate_platform_username("ali-ce")


class TestWalletAddress:
    def test_checksummed_address_is_valid(self):
        assert validate_wallet_address(CHECKSUMMED) is None

    def test_all_lowercase_and_uppercase_are_accepted(self):
        assert validate_wallet_address(CHECKSUMMED.lower()) is None
        assert validate_wallet_address("0x" + CHECKSUMMED[2:].upper()) is None

    def test_single_flipped_case_is_rejected(self):
        flipped = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        assert validate_wallet_address(flipped) == "Invalid Ethereum wallet address checksum"

    @pytest.mark.parametrize(
        "value",
        [
            "0x123",
            "5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
            "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAeZ",
        ],
    )
    def test_malformed(self, value):
        assert validate_wallet_address(value) == "Invalid Ethereum wallet address"

    def test_missing(self):
        assert validate_wallet_address(None) == "Wallet address is required"

    def test_normalization_checksums(self):
        assert normalize_wallet_address(CHECKSUMMED.lower()) == CHECKSUMMED


class TestDiscordUsername:
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_valid(self, value):
        assert validate_discord_username(value) is None

    def test_hash_allowed_by_default(self):
        assert validate_discord_username("alice#1234") is None

    def test_hash_rejected_when_disabled(self):
        assert validate_discord_username("alice#1234", allow_hash=False) is not None
        assert validate_discord_username("alice_1234", allow_hash=False) is None

    def test_too_long(self):
        assert validate_discord_username("a" * 33) == "Discord username is too long"


class TestEmail:
    def test_valid(self):
        assert validate_email("alice@example.com") is None

    @pytest.mark.parametrize("value", ["alice", "alice@", "alice@example", "al ice@example.com"])
    def test_invalid(self, value):
        assert validate_email(value) == "Invalid email address"

    def test_missing(self):
        assert validate_email("") == "Email is required"

    def test_too_long(self):
        assert validate_email("a" * 250 + "@b.co") == "Email address is too long"


class TestAggregates:
    def test_empty_entry_form_reports_every_required_field(self):
        errors = validate_entry_fields({})
        assert errors == {
            "topicId": "Topic ID is required",
            "telegramUsername": "Telegram username is required",
            "platformUsername": "Platform username is required",
            "walletAddress": "Wallet address is required",
            "email": "Email is required",
        }

    def test_valid_entry_form(self):
        form = {
            "topicId": "5b0c2f8e-0000-4000-8000-000000000000",
            "telegramUsername": "@alice",
            "platformUsername": "alice.dev",
            "walletAddress": CHECKSUMMED,
            "discordUsername": "",
            "email": "alice@example.com",
        }
        assert validate_entry_fields(form) == {}

    def test_only_failing_fields_are_reported(self):
        form = {
            "topicId": "t1",
            "telegramUsername": "alice",
            "platformUsername": "alice.dev",
            "walletAddress": CHECKSUMMED,
            "email": "not-an-email",
        }
        errors = validate_entry_fields(form)
        assert set(errors) == {"telegramUsername", "email"}

    def test_lenient_telegram_policy_is_forwarded(self):
        form = {
            "topicId": "t1",
            "telegramUsername": "alice",
            "platformUsername": "alice.dev",
            "walletAddress": CHECKSUMMED,
            "email": "alice@example.com",
        }
        assert validate_entry_fields(form, require_telegram_at=False) == {}

    def test_topic_fields(self):
        assert validate_topic_fields({"name": "", "description": "x"}) == {
            "name": "Topic name is required"
        }
        assert validate_topic_fields({"name": "n" * 101, "description": "d" * 501}) == {
            "name": "Topic name is too long",
            "description": "Description is too long",
        }


class TestTrailingNewline:
    """A trailing newline must never slip past a pattern and into the store."""

    def test_each_field_rejects_trailing_newline(self):
        assert validate_telegram_username("@alice\n") is not None
        assert validate_telegram_username("alice\n", require_at=False) is not None
        assert validate_platform_username("alice.dev\n") is not None
        assert validate_wallet_address(CHECKSUMMED + "\n") == "Invalid Ethereum wallet address"
        assert validate_discord_username("bob\n") is not None
        assert validate_discord_username("bob\n", allow_hash=False) is not None
        assert validate_email("a@x.com\n") == "Invalid email address"

    def test_aggregate_reports_every_newline_field(self):
        form = {
            "topicId": "t1",
            "telegramUsername": "@alice\n",
            "platformUsername": "alice.dev\n",
            "walletAddress": CHECKSUMMED + "\n",
            "discordUsername": "bob\n",
            "email": "a@x.com\n",
        }
        assert set(validate_entry_fields(form)) == {
            "telegramUsername",
            "platformUsername",
            "walletAddress",
            "discordUsername",
            "email",
        }
