"""Entry submission, listing, deletion and export.

Submission pipeline:
1. Field validators (all failing fields reported at once)
2. Platform username verification (external predicate)
3. Writer lock (per topic, or one shared lock under global scope), then in one Unit of Work:
   topic existence -> uniqueness scan -> insert (unique constraints as backstop)
"""

from typing import Mapping, Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from topicbox.core.config import Settings, UniquenessScope
from topicbox.core.timezone import current_millis
from topicbox.models.entry import Entry
from topicbox.services.exceptions import (
    InvalidPlatformUsername,
    NotFound,
    TopicInactive,
    ValidationError,
)
from topicbox.services.export import export_filename, format_entries_csv
from topicbox.services.pagination import Page, PageRequest, paginate_in_memory
from topicbox.services.platform_username import PlatformUsernameChecker
from topicbox.services.query_router import EntryQueryRouter
from topicbox.services.topic_locks import TopicLocks
from topicbox.services.uniqueness import check_uniqueness, violation_for_constraint
from topicbox.services.validators import (
    normalize_telegram_username,
    normalize_wallet_address,
    validate_entry_fields,
)

logger = structlog.get_logger()

INVALID_PLATFORM_USERNAME_MESSAGE = (
    "Invalid platform username. Please check the format and try again."
)

# Global uniqueness spans topics, so every submission shares one writer lock
GLOBAL_LOCK_KEY = "*"


def parse_id(raw: Optional[str], code: str, message: str) -> UUID:
    """Parse an opaque id; ids that cannot exist are reported as not found."""
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise NotFound(message, code=code) from e


class EntryService:
    """Entry operations. Holds no per-request state; every call opens its own UoW."""

    def __init__(
        self,
        uow_factory,
        platform_checker: PlatformUsernameChecker,
        settings: Settings,
        topic_locks: TopicLocks,
        query_router: EntryQueryRouter | None = None,
    ):
        self.uow_factory = uow_factory
        self.platform_checker = platform_checker
        self.settings = settings
        self.topic_locks = topic_locks
        self.query_router = query_router or EntryQueryRouter()

    async def submit(self, form: Mapping[str, Optional[str]]) -> Entry:
        """Validate and store a new entry.

        Args:
            form: Raw submission keyed by wire name (topicId, telegramUsername,
                platformUsername, walletAddress, discordUsername, email).
                A client-supplied topicName is ignored; the stored topic's name is used.

        Returns:
            Stored entry with generated id and created_at

        Raises:
            ValidationError: One or more fields failed local validation
            InvalidPlatformUsername: Verification service rejected the username
            ExternalCheckFailure: Verification service unavailable
            NotFound: Topic does not exist
            UniquenessConflict: Wallet, email or telegram+platform already used
        """
        errors = validate_entry_fields(
            form,
            require_telegram_at=self.settings.telegram_require_at,
            allow_discord_hash=self.settings.discord_allow_hash,
        )
        if errors:
            logger.info("entry.validation_failed", fields=sorted(errors))
            raise ValidationError(errors)

        topic_id = parse_id(form["topicId"], "TOPIC_NOT_FOUND", "Topic not found")
        platform_username = form["platformUsername"]

        if not await self.platform_checker.is_valid(platform_username):
            logger.info("entry.platform_username_rejected", topic_id=str(topic_id))
            raise InvalidPlatformUsername(INVALID_PLATFORM_USERNAME_MESSAGE)

        candidate = Entry(
            topic_id=topic_id,
            topic_name="",
            telegram_username=normalize_telegram_username(form["telegramUsername"]),
            platform_username=platform_username,
            wallet_address=normalize_wallet_address(form["walletAddress"]),
            discord_username=form.get("discordUsername") or None,
            email=form["email"],
        )

        lock_key = (
            GLOBAL_LOCK_KEY
            if self.settings.uniqueness_scope == UniquenessScope.GLOBAL
            else topic_id
        )
        async with self.topic_locks.hold(lock_key):
            async with await self.uow_factory() as uow:
                topic = await uow.topics.get_by_id(topic_id)
                if topic is None:
                    raise NotFound("Topic not found", code="TOPIC_NOT_FOUND")
                if not topic.is_active:
                    raise TopicInactive("This topic is no longer accepting entries")

                existing = await uow.entries.list_by_topic(topic_id)
                elsewhere: list[Entry] = []
                if self.settings.uniqueness_scope == UniquenessScope.GLOBAL:
                    elsewhere = await uow.entries.list_outside_topic_matching(
                        topic_id, candidate.wallet_address, candidate.email
                    )

                violation = check_uniqueness(candidate, existing, elsewhere)
                if violation is not None:
                    logger.info(
                        "entry.duplicate_rejected",
                        topic_id=str(topic_id),
                        constraint=violation.constraint,
                    )
                    raise violation.to_error()

                candidate.topic_name = topic.name
                candidate.created_at = current_millis()
                try:
                    entry = await uow.entries.add(candidate)
                except IntegrityError as e:
                    violation = violation_for_constraint(str(e.orig))
                    if violation is None:
                        raise
                    logger.warning(
                        "entry.duplicate_rejected_by_store",
                        topic_id=str(topic_id),
                        constraint=violation.constraint,
                    )
                    raise violation.to_error() from e

        logger.info("entry.created", entry_id=str(entry.id), topic_id=str(topic_id))
        return entry

    async def delete(self, raw_id: Optional[str]) -> None:
        """Delete one entry.

        Raises:
            ValidationError: id missing
            NotFound: entry does not exist
        """
        if not raw_id:
            raise ValidationError({"id": "Entry ID is required"}, message="Entry ID is required")
        entry_id = parse_id(raw_id, "ENTRY_NOT_FOUND", "Entry not found")

        async with await self.uow_factory() as uow:
            entry = await uow.entries.get_by_id(entry_id)
            if entry is None:
                raise NotFound("Entry not found", code="ENTRY_NOT_FOUND")
            await uow.entries.delete(entry)

        logger.info("entry.deleted", entry_id=str(entry_id))

    async def list_page(
        self,
        request: PageRequest,
        topic_id: Optional[str] = None,
        topic_name: Optional[str] = None,
    ) -> Page[Entry]:
        """List entries, filtered by topic id (exact) or topic name (substring).

        topicId wins when both are given. A topicId that is not a valid id
        matches nothing and yields an empty page.
        """
        if topic_id:
            parsed = self._parse_filter_id(topic_id)
            if parsed is None:
                return paginate_in_memory([], request)
            async with await self.uow_factory() as uow:
                return await self.query_router.list_entries(uow, request, topic_id=parsed)

        async with await self.uow_factory() as uow:
            return await self.query_router.list_entries(uow, request, topic_name=topic_name)

    async def export_csv(
        self, topic_id: Optional[str] = None, topic_name: Optional[str] = None
    ) -> tuple[str, str]:
        """Render every matching entry as CSV.

        Returns:
            Tuple of (download file name, CSV text)
        """
        async with await self.uow_factory() as uow:
            if topic_id:
                parsed = self._parse_filter_id(topic_id)
                if parsed is None:
                    entries: list[Entry] = []
                    label = None
                else:
                    entries = await self.query_router.list_all_matching(uow, topic_id=parsed)
                    topic = await uow.topics.get_by_id(parsed)
                    label = topic.name if topic else None
            else:
                entries = await self.query_router.list_all_matching(uow, topic_name=topic_name)
                label = topic_name or None

        logger.info("entries.exported", count=len(entries))
        return export_filename(label), format_entries_csv(entries, self.settings.export_timezone)

    @staticmethod
    def _parse_filter_id(raw: str) -> UUID | None:
        # A filter on an id that cannot exist matches nothing
        try:
            return UUID(raw)
        except ValueError:
            return None
