"""CSV export of entries.

Columns are fixed: Topic Name, Telegram Username, Platform Username, Wallet
Address, Discord Username, Email, Submission Date. Dates use the pattern
"MMM d, yyyy h:mm a" (e.g. "Mar 5, 2025 9:07 PM") with English month names
regardless of the process locale. Quoting follows RFC 4180 via the csv module.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Iterable
from zoneinfo import ZoneInfo

from topicbox.models.entry import Entry

CSV_HEADER = (
    "Topic Name",
    "Telegram Username",
    "Platform Username",
    "Wallet Address",
    "Discord Username",
    "Email",
    "Submission Date",
)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_submission_date(created_at_ms: int, tz: str = "UTC") -> str:
    """Format an epoch-millisecond timestamp as "MMM d, yyyy h:mm a".

    Args:
        created_at_ms: Milliseconds since the epoch
        tz: IANA zone name the date is rendered in

    Returns:
        Human-readable date, e.g. "Jan 2, 2025 3:04 PM"
    """
    moment = datetime.fromtimestamp(created_at_ms / 1000, tz=timezone.utc).astimezone(ZoneInfo(tz))
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{_MONTHS[moment.month - 1]} {moment.day}, {moment.year} "
        f"{hour}:{moment.minute:02d} {meridiem}"
    )


def entry_to_row(entry: Entry, tz: str = "UTC") -> list[str]:
    return [
        entry.topic_name,
        entry.telegram_username,
        entry.platform_username,
        entry.wallet_address,
        entry.discord_username or "",
        entry.email,
        format_submission_date(entry.created_at, tz),
    ]


def format_entries_csv(entries: Iterable[Entry], tz: str = "UTC") -> str:
    """Serialize entries to CSV text, header included, in the given order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow(entry_to_row(entry, tz))
    return buffer.getvalue()


def export_filename(topic_name: str | None = None) -> str:
    """Download file name, e.g. "Entries - Airdrop.csv"."""
    if topic_name:
        # Quotes and path separators would break the Content-Disposition header
        safe = "".join(ch for ch in topic_name if ch not in '"\\/\r\n')
        return f"Entries - {safe}.csv"
    return "Entries.csv"
