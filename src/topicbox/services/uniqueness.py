"""Uniqueness enforcement for entry submissions.

A candidate is compared with the entries that already exist for its topic using a
linear scan. Precedence is fixed, so exactly one violation is reported when
several apply: wallet address, then email, then the (telegram, platform) pair.

Under the global policy, entries of other topics sharing the wallet or email are
checked afterwards (wallet, then email).
"""

from dataclasses import dataclass
from typing import Iterable, Protocol

from topicbox.models.entry import UQ_TOPIC_EMAIL, UQ_TOPIC_USER, UQ_TOPIC_WALLET
from topicbox.services.exceptions import UniquenessConflict


class EntryIdentity(Protocol):
    wallet_address: str
    email: str
    telegram_username: str
    platform_username: str


@dataclass(frozen=True)
class UniquenessViolation:
    """The single constraint a candidate violates."""

    constraint: str
    code: str
    message: str

    def to_error(self) -> UniquenessConflict:
        return UniquenessConflict(self.constraint, self.message, self.code)


DUPLICATE_WALLET = UniquenessViolation(
    constraint="wallet_address",
    code="DUPLICATE_WALLET",
    message="This wallet address has already been used for this topic",
)
DUPLICATE_EMAIL = UniquenessViolation(
    constraint="email",
    code="DUPLICATE_EMAIL",
    message="This email address has already been used for this topic",
)
DUPLICATE_SUBMISSION = UniquenessViolation(
    constraint="telegram_platform",
    code="DUPLICATE_SUBMISSION",
    message="You have already submitted an entry for this topic",
)
DUPLICATE_WALLET_GLOBAL = UniquenessViolation(
    constraint="wallet_address",
    code="DUPLICATE_WALLET",
    message="This wallet address has already been used for another topic",
)
DUPLICATE_EMAIL_GLOBAL = UniquenessViolation(
    constraint="email",
    code="DUPLICATE_EMAIL",
    message="This email address has already been used for another topic",
)

# Table constraint name -> violation, for duplicates rejected by the database
CONSTRAINT_VIOLATIONS = {
    UQ_TOPIC_WALLET: DUPLICATE_WALLET,
    UQ_TOPIC_EMAIL: DUPLICATE_EMAIL,
    UQ_TOPIC_USER: DUPLICATE_SUBMISSION,
}


def check_uniqueness(
    candidate: EntryIdentity,
    existing_in_topic: Iterable[EntryIdentity],
    existing_elsewhere: Iterable[EntryIdentity] = (),
) -> UniquenessViolation | None:
    """Decide whether a candidate entry may be stored.

    Args:
        candidate: Normalized candidate (canonical wallet, "@"-prefixed telegram)
        existing_in_topic: Every stored entry of the candidate's topic
        existing_elsewhere: Entries of other topics (global policy only)

    Returns:
        None to accept, otherwise the violated constraint
    """
    in_topic = list(existing_in_topic)

    if any(e.wallet_address == candidate.wallet_address for e in in_topic):
        return DUPLICATE_WALLET
    if any(e.email == candidate.email for e in in_topic):
        return DUPLICATE_EMAIL
    if any(
        e.telegram_username == candidate.telegram_username
        and e.platform_username == candidate.platform_username
        for e in in_topic
    ):
        return DUPLICATE_SUBMISSION

    elsewhere = list(existing_elsewhere)
    if any(e.wallet_address == candidate.wallet_address for e in elsewhere):
        return DUPLICATE_WALLET_GLOBAL
    if any(e.email == candidate.email for e in elsewhere):
        return DUPLICATE_EMAIL_GLOBAL

    return None


def violation_for_constraint(error_text: str) -> UniquenessViolation | None:
    """Map a database unique-violation message to the matching violation."""
    for name, violation in CONSTRAINT_VIOLATIONS.items():
        if name in error_text:
            return violation
    return None
