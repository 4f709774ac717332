"""
Data model shared by the harvesting pipeline.

Sources are static registry entries. Articles are immutable values: every
pipeline stage that changes an article returns a new one via ``evolve``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


class Reader(str, Enum):
    """How a source is read."""
    SCRAPPER = "scrapper"
    API = "api"
    MOBILE = "mobile"


class Status(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SourceKey(str, Enum):
    """Stable keys used to dispatch a source to its extraction strategy."""
    FOOTBALL_UA = "football-ua"


@dataclass(frozen=True)
class Instruction:
    """Free-form per-source directive. Only the status is consulted today."""
    description: str = ""
    status: Status = Status.ACTIVE


@dataclass(frozen=True)
class Source:
    """A configured harvest target."""
    id: int
    name: str
    key: SourceKey
    url: str
    reader: Reader
    period: int  # minutes; informational, the scheduler uses a fixed interval
    status: Status = Status.ACTIVE
    instructions: Tuple[Instruction, ...] = field(default_factory=tuple)

    @property
    def is_active(self) -> bool:
        return self.status is Status.ACTIVE


@dataclass(frozen=True)
class ArticleContent:
    """An extracted article moving through the pipeline.

    ``created`` is epoch milliseconds. ``id`` is only set once the article has
    been written to storage.
    """
    title: str
    link: str
    content: str
    created: int
    image: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def evolve(self, **changes) -> "ArticleContent":
        return replace(self, **changes)
