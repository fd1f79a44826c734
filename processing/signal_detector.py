"""processing.signal_detector

Scores a raw batch of signals: keyword cleanup, recency decay, cross-source
presence and min-max weight normalization. Also exposes keyword anomaly
detection and ad-hoc velocity queries.

All scores are relative to the batch passed in; nothing is cached between calls.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Set

from processing.models import DAY_MS, ProcessedSignal, Signal, age_days, now_ms

logger = logging.getLogger(__name__)

# Generic web/ecosystem noise that shows up in collector keyword lists.
STOP_KEYWORDS = frozenset({
    "https", "http", "www", "com", "org", "dev", "html", "json", "api",
    "github", "git", "readme", "license", "master", "main",
    "rust", "typescript", "javascript", "python", "java", "cpp",
    "solana", "program", "programs", "repo", "repository",
    "code", "build", "built", "source", "open", "new", "use", "using",
    "project", "lib", "library", "example", "examples", "test", "tests",
    "the", "and", "for", "with", "this", "that", "from", "are", "was",
    "into", "about", "based", "also", "just", "only", "more", "some",
    "implementation", "tool", "tools", "app", "application",
})

RECENCY_DECAY_DAYS = 7.0

WEIGHT_FACTOR = 0.3
RECENCY_FACTOR = 0.4
CROSS_SOURCE_FACTOR = 0.3


def total_score(signal: Any) -> float:
    """Combined ranking score. Missing score attributes count as zero."""
    return (
        float(getattr(signal, "normalized_weight", 0.0) or 0.0) * WEIGHT_FACTOR
        + float(getattr(signal, "recency_score", 0.0) or 0.0) * RECENCY_FACTOR
        + float(getattr(signal, "cross_source_score", 0.0) or 0.0) * CROSS_SOURCE_FACTOR
    )


class SignalDetector:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        extra = self.config.get("scoring", {}).get("extra_stop_keywords") or []
        self.stop_keywords = STOP_KEYWORDS | {str(k).lower() for k in extra}

    def clean_keywords(self, signals: Iterable[Signal]) -> List[Signal]:
        cleaned: List[Signal] = []
        for s in signals:
            kept = [kw for kw in s.keywords if kw.lower() not in self.stop_keywords]
            cleaned.append(replace(s, keywords=kept) if len(kept) != len(s.keywords) else s)
        return cleaned

    def process_signals(self, signals: List[Signal], now: Optional[float] = None) -> List[ProcessedSignal]:
        if not signals:
            return []
        if now is None:
            now = now_ms()

        for s in signals:
            s.check_collected()
        signals = self.clean_keywords(signals)
        source_map = self._build_keyword_source_map(signals)

        weights = [s.weight for s in signals]
        min_w, max_w = min(weights), max(weights)

        processed = [
            ProcessedSignal(
                id=s.id,
                source=s.source,
                timestamp=s.timestamp,
                content=s.content,
                keywords=s.keywords,
                weight=s.weight,
                metadata=s.metadata,
                normalized_weight=self._normalize_weight(s.weight, min_w, max_w),
                recency_score=self._recency_score(s.timestamp, now),
                cross_source_score=self._cross_source_score(s.keywords, source_map),
            )
            for s in signals
        ]
        processed.sort(key=total_score, reverse=True)

        logger.info(
            "SignalDetector: processed %s signals (%s distinct keywords, %s sources)",
            len(processed), len(source_map), len({s.source for s in processed}),
        )
        return processed

    def detect_anomalies(self, signals: List[Signal]) -> List[Signal]:
        """Signals carrying a keyword whose frequency exceeds mean + 2 stdev."""
        freq: Dict[str, int] = defaultdict(int)
        for s in signals:
            for kw in s.keywords:
                freq[kw] += 1

        counts = list(freq.values())
        if not counts:
            return []

        mean = sum(counts) / len(counts)
        stdev = math.sqrt(sum((c - mean) ** 2 for c in counts) / len(counts))
        cutoff = mean + 2 * stdev
        flagged = {kw for kw, c in freq.items() if c > cutoff}
        if flagged:
            logger.debug("SignalDetector: anomalous keywords %s", sorted(flagged))

        return [s for s in signals if any(kw in flagged for kw in s.keywords)]

    def calculate_velocity(
        self,
        signals: List[Signal],
        keyword: str,
        window_days: float = 7,
        now: Optional[float] = None,
    ) -> float:
        if now is None:
            now = now_ms()
        window = window_days * DAY_MS

        recent = 0
        older = 0
        for s in signals:
            if keyword not in s.keywords:
                continue
            if now - s.timestamp < window:
                recent += 1
            elif now - 2 * window < s.timestamp < now - window:
                older += 1

        if older == 0:
            return 2.0 if recent > 0 else 0.0
        return recent / older

    def extract_top_keywords(self, signals: List[Signal], top_n: int = 30) -> List[Dict[str, Any]]:
        scores: Dict[str, float] = defaultdict(float)
        for s in signals:
            score = total_score(s)
            for kw in s.keywords:
                scores[kw] += score

        ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
        return [{"keyword": kw, "score": score} for kw, score in ranked[:top_n]]

    @staticmethod
    def _build_keyword_source_map(signals: List[Signal]) -> Dict[str, Set[str]]:
        source_map: Dict[str, Set[str]] = defaultdict(set)
        for s in signals:
            for kw in s.keywords:
                source_map[kw].add(s.source.value)
        return source_map

    @staticmethod
    def _recency_score(timestamp: float, now: float) -> float:
        # Future timestamps give a score above 1; left unclamped.
        return math.exp(-age_days(timestamp, now) / RECENCY_DECAY_DAYS)

    @staticmethod
    def _cross_source_score(keywords: Iterable[str], source_map: Dict[str, Set[str]]) -> float:
        total = 0
        count = 0
        for kw in keywords:
            sources = source_map.get(kw)
            if sources:
                total += len(sources)
                count += 1
        return total / count if count else 0.0

    @staticmethod
    def _normalize_weight(weight: float, min_w: float, max_w: float) -> float:
        if max_w == min_w:
            return 0.5
        return (weight - min_w) / (max_w - min_w)
