"""processing.models

Record types shared by the scorer and the clusterer.

Signals come from collectors and are never mutated. ProcessedSignal carries the
per-batch scores; those are only meaningful relative to the batch they were
computed from. Narrative is the only record that leaves an analysis run.
"""

from __future__ import annotations

import math
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

MAX_KEYWORDS = 25

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> float:
    """Wall-clock time in epoch milliseconds."""
    return time.time() * 1000


class SignalValidationError(ValueError):
    """Raised when a signal record cannot be scored safely."""


class SourceCategory(str, Enum):
    REPOSITORY = "github"
    ONCHAIN = "onchain"
    SOCIAL = "twitter"
    ARTICLE = "report"
    FORUM = "discord"

    @classmethod
    def parse(cls, value: Any) -> "SourceCategory":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in _SOURCE_ALIASES:
            return _SOURCE_ALIASES[key]
        raise SignalValidationError(f"unknown source category: {value!r}")


# Descriptive names accepted alongside the collector wire values.
_SOURCE_ALIASES = {
    "repository-activity": SourceCategory.REPOSITORY,
    "on-chain-activity": SourceCategory.ONCHAIN,
    "social-post": SourceCategory.SOCIAL,
    "article": SourceCategory.ARTICLE,
    "forum-post": SourceCategory.FORUM,
}


def _finite(value: Any, what: str, signal_id: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SignalValidationError(f"signal {signal_id!r}: {what} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise SignalValidationError(f"signal {signal_id!r}: {what} must be finite, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class Signal:
    id: str
    source: SourceCategory
    timestamp: float
    content: str = ""
    keywords: Tuple[str, ...] = ()
    weight: float = 1.0
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.id or not isinstance(self.id, str):
            raise SignalValidationError(f"signal id must be a non-empty string, got {self.id!r}")
        object.__setattr__(self, "source", SourceCategory.parse(self.source))
        object.__setattr__(self, "timestamp", _finite(self.timestamp, "timestamp", self.id))

        weight = _finite(self.weight, "weight", self.id)
        if weight < 0:
            raise SignalValidationError(f"signal {self.id!r}: weight must be non-negative, got {weight}")
        object.__setattr__(self, "weight", weight)

        if isinstance(self.keywords, str) or not isinstance(self.keywords, (list, tuple)):
            raise SignalValidationError(f"signal {self.id!r}: keywords must be a list of strings")
        for kw in self.keywords:
            if not isinstance(kw, str):
                raise SignalValidationError(f"signal {self.id!r}: keyword {kw!r} is not a string")
        object.__setattr__(self, "keywords", tuple(self.keywords))

    def check_collected(self) -> "Signal":
        """Checks limits that only apply to signals as collectors emit them.

        Derived copies (e.g. alias-expanded keyword sets during clustering) may
        legitimately exceed these.
        """
        if len(self.keywords) > MAX_KEYWORDS:
            raise SignalValidationError(
                f"signal {self.id!r}: {len(self.keywords)} keywords exceeds the limit of {MAX_KEYWORDS}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Signal":
        if not isinstance(data, dict):
            raise SignalValidationError(f"signal record must be an object, got {type(data).__name__}")
        return cls(
            id=data.get("id", ""),
            source=data.get("source"),
            timestamp=data.get("timestamp"),
            content=str(data.get("content") or ""),
            keywords=data.get("keywords") or [],
            weight=data.get("weight", 1.0),
            metadata=dict(data.get("metadata") or {}),
        ).check_collected()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "timestamp": self.timestamp,
            "content": self.content,
            "metadata": dict(self.metadata),
            "keywords": list(self.keywords),
            "weight": self.weight,
        }


@dataclass(frozen=True)
class ProcessedSignal(Signal):
    normalized_weight: float = 0.0
    recency_score: float = 0.0
    cross_source_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["normalizedWeight"] = self.normalized_weight
        out["recencyScore"] = self.recency_score
        out["crossSourceScore"] = self.cross_source_score
        return out


@dataclass
class NarrativeMetrics:
    cross_source_count: int
    velocity: float
    recency: float
    key_voice_mentions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crossSourceCount": self.cross_source_count,
            "velocity": self.velocity,
            "recency": self.recency,
            "keyVoiceMentions": self.key_voice_mentions,
        }


def new_narrative_id() -> str:
    return f"narrative_{uuid.uuid4().hex[:12]}"


@dataclass
class Narrative:
    title: str
    description: str
    signals: List[Signal]
    keywords: List[str]
    score: float
    metrics: NarrativeMetrics
    timestamp: float = field(default_factory=now_ms)
    id: str = field(default_factory=new_narrative_id)
    # Filled by the idea generator downstream.
    ideas: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def theme(self) -> str:
        return self.title.split(":", 1)[0].strip()

    def to_dict(self, include_signals: bool = True) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "signals": [s.to_dict() for s in self.signals] if include_signals else [],
            "keywords": list(self.keywords),
            "score": self.score,
            "metrics": self.metrics.to_dict(),
            "timestamp": self.timestamp,
            "ideas": list(self.ideas),
        }


def age_days(timestamp: float, now: Optional[float] = None) -> float:
    ref = now_ms() if now is None else now
    return (ref - timestamp) / DAY_MS
