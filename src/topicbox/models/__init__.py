"""SQLModel database entities.

All models are imported here to ensure they're registered with SQLModel metadata
for Alembic autogenerate support.
"""

from topicbox.models.entry import Entry
from topicbox.models.topic import Topic

__all__ = [
    "Topic",
    "Entry",
]
