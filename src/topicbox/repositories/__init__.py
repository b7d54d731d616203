"""Repository layer for topicbox.

Provides data access abstractions for all domain entities.
No base classes - each repository is self-contained.
"""

from topicbox.repositories.entry import EntryRepository
from topicbox.repositories.topic import TopicRepository

__all__ = [
    "TopicRepository",
    "EntryRepository",
]
