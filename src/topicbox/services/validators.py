"""Field validation for entry submissions and topics.

Each validator takes one raw value and returns None when it is valid, or a
human-readable reason. Presence is always checked first (an empty required
field reports "... is required", never a pattern error), then format, then length.

The aggregate helpers return a mapping of field name (wire name, camelCase) to
message containing only the failing fields.
"""

import re
from typing import Mapping, Optional

from eth_utils.address import (
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

TELEGRAM_MAX_LENGTH = 32
PLATFORM_MIN_LENGTH = 3
PLATFORM_MAX_LENGTH = 20
DISCORD_MAX_LENGTH = 32
EMAIL_MAX_LENGTH = 254
TOPIC_NAME_MAX_LENGTH = 100
TOPIC_DESCRIPTION_MAX_LENGTH = 500

_TELEGRAM_STRICT_RE = re.compile(r"@[A-Za-z0-9_]+")
_TELEGRAM_LENIENT_RE = re.compile(r"@?[A-Za-z0-9_]+")
_PLATFORM_CHARS_RE = re.compile(r"[A-Za-z0-9_.]+")
_HEX_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
_DISCORD_RE = re.compile(r"[A-Za-z0-9_]+")
_DISCORD_WITH_HASH_RE = re.compile(r"[A-Za-z0-9_#]+")
_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def validate_telegram_username(value: Optional[str], require_at: bool = True) -> Optional[str]:
    """Validate a Telegram username.

    Args:
        value: Raw input, e.g. "@alice_01"
        require_at: Strict mode, the leading "@" is mandatory

    Returns:
        None if valid, otherwise the reason
    """
    if not value:
        return "Telegram username is required"
    if require_at:
        if not value.startswith("@"):
            return "Telegram username must start with '@'"
        if not _TELEGRAM_STRICT_RE.fullmatch(value):
            return (
                "Telegram username can only contain letters, numbers, "
                "and underscores after the '@'"
            )
    elif not _TELEGRAM_LENIENT_RE.fullmatch(value):
        return "Telegram username can only contain letters, numbers, and underscores"
    if len(value.lstrip("@")) > TELEGRAM_MAX_LENGTH:
        return "Telegram username is too long"
    return None


def normalize_telegram_username(value: str) -> str:
    """Return the canonical stored form, which always carries the leading "@"."""
    return value if value.startswith("@") else f"@{value}"


def validate_platform_username(value: Optional[str]) -> Optional[str]:
    """Validate platform username format (local rules only)."""
    if not value:
        return "Platform username is required"
    if not PLATFORM_MIN_LENGTH <= len(value) <= PLATFORM_MAX_LENGTH:
        return (
            f"Platform username must be between {PLATFORM_MIN_LENGTH} "
            f"and {PLATFORM_MAX_LENGTH} characters"
        )
    if value[0].isdigit():
        return "Platform username cannot start with a number"
    if not _PLATFORM_CHARS_RE.fullmatch(value):
        return "Platform username can only contain letters, numbers, underscores, and dots"
    return None


def validate_wallet_address(value: Optional[str]) -> Optional[str]:
    """Validate an Ethereum wallet address including its EIP-55 checksum.

    All-lowercase and all-uppercase hex carry no checksum and are accepted.
    Mixed-case input must match its checksum exactly; a single flipped letter
    case is rejected.
    """
    if not value:
        return "Wallet address is required"
    if not _HEX_ADDRESS_RE.fullmatch(value):
        return "Invalid Ethereum wallet address"
    if is_checksum_formatted_address(value) and not is_checksum_address(value):
        return "Invalid Ethereum wallet address checksum"
    return None


def normalize_wallet_address(value: str) -> str:
    """Return the checksummed canonical form of a valid wallet address."""
    return to_checksum_address(value)


def validate_discord_username(value: Optional[str], allow_hash: bool = True) -> Optional[str]:
    """Validate the optional Discord username. Empty means not provided."""
    if not value:
        return None
    if allow_hash:
        if not _DISCORD_WITH_HASH_RE.fullmatch(value):
            return "Discord username can only contain letters, numbers, underscores, and #"
    elif not _DISCORD_RE.fullmatch(value):
        return "Discord username can only contain letters, numbers, and underscores"
    if len(value) > DISCORD_MAX_LENGTH:
        return "Discord username is too long"
    return None


def validate_email(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Email is required"
    if not _EMAIL_RE.fullmatch(value):
        return "Invalid email address"
    if len(value) > EMAIL_MAX_LENGTH:
        return "Email address is too long"
    return None


def validate_topic_name(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Topic name is required"
    if len(value) > TOPIC_NAME_MAX_LENGTH:
        return "Topic name is too long"
    return None


def validate_topic_description(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Description is required"
    if len(value) > TOPIC_DESCRIPTION_MAX_LENGTH:
        return "Description is too long"
    return None


def validate_entry_fields(
    form: Mapping[str, Optional[str]],
    require_telegram_at: bool = True,
    allow_discord_hash: bool = True,
) -> dict[str, str]:
    """Run every entry field validator.

    Args:
        form: Raw submission keyed by wire name (topicId, telegramUsername,
            platformUsername, walletAddress, discordUsername, email)
        require_telegram_at: Strict Telegram mode
        allow_discord_hash: Accept "#" in Discord usernames

    Returns:
        Mapping of failing field name to reason; empty when the form is valid
    """
    results = {
        "topicId": None if form.get("topicId") else "Topic ID is required",
        "telegramUsername": validate_telegram_username(
            form.get("telegramUsername"), require_at=require_telegram_at
        ),
        "platformUsername": validate_platform_username(form.get("platformUsername")),
        "walletAddress": validate_wallet_address(form.get("walletAddress")),
        "discordUsername": validate_discord_username(
            form.get("discordUsername"), allow_hash=allow_discord_hash
        ),
        "email": validate_email(form.get("email")),
    }
    return {field: reason for field, reason in results.items() if reason is not None}


def validate_topic_fields(form: Mapping[str, Optional[str]]) -> dict[str, str]:
    """Run the topic name and description validators."""
    results = {
        "name": validate_topic_name(form.get("name")),
        "description": validate_topic_description(form.get("description")),
    }
    return {field: reason for field, reason in results.items() if reason is not None}
