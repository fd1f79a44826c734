"""intelligence.narrative_clusterer

Groups scored signals into narratives.

Clustering is greedy and single pass: signals are visited in descending score
order and each one joins the most similar existing cluster (weighted Jaccard
over normalized keywords) or starts a new one. Assignments are final; clusters
are never merged or rebalanced. Surviving clusters become Narratives, which are
then deduplicated by title and theme, penalized when single-source, and capped.
"""

from __future__ import annotations

import logging
import math
import re
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Set

from intelligence.theme_classifier import build_description, format_title, identify_theme
from processing.keyword_normalizer import keyword_weight, normalize_keywords
from processing.models import (
    DAY_MS,
    Narrative,
    NarrativeMetrics,
    ProcessedSignal,
    SourceCategory,
    age_days,
    now_ms,
)

logger = logging.getLogger(__name__)

MIN_CLUSTER_SIZE = 3
SIMILARITY_THRESHOLD = 0.25
MAX_NARRATIVES = 10
MAX_PER_THEME = 2
SINGLE_SOURCE_PENALTY = 0.4

CENTROID_SIZE = 10
NARRATIVE_KEYWORDS = 15
KEY_VOICE_WEIGHT = 2.5
CLUSTER_RECENCY_DECAY_DAYS = 10.0

_NON_ALPHA_RE = re.compile(r"[^a-z]")


@dataclass
class KeywordCluster:
    # dict as an insertion-ordered set
    keywords: Dict[str, None] = field(default_factory=dict)
    signals: List[ProcessedSignal] = field(default_factory=list)
    centroid: List[str] = field(default_factory=list)

    def add(self, signal: ProcessedSignal) -> None:
        self.signals.append(signal)
        for kw in signal.keywords:
            self.keywords[kw] = None
        self.centroid = update_centroid(self.signals)


def calculate_similarity(a: Sequence[str], b: Sequence[str]) -> float:
    """Weighted Jaccard similarity of two keyword collections.

    Ecosystem terms weigh 2.0, everything else 1.0. Returns 0.0 when either
    side is empty.
    """
    set_a = set(a)
    set_b = set(b)
    if not set_a or not set_b:
        return 0.0
    union = set_a | set_b
    denominator = sum(keyword_weight(kw) for kw in union)
    numerator = sum(keyword_weight(kw) for kw in set_a & set_b)
    return numerator / denominator


def update_centroid(signals: Sequence[ProcessedSignal], size: int = CENTROID_SIZE) -> List[str]:
    freq: Dict[str, float] = {}
    for s in signals:
        for kw in s.keywords:
            freq[kw] = freq.get(kw, 0.0) + keyword_weight(kw)
    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
    return [kw for kw, _ in ranked[:size]]


def normalize_title(title: str) -> str:
    return _NON_ALPHA_RE.sub("", title.lower())


class NarrativeClusterer:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        cfg = self.config.get("clustering", {}) or {}
        self.min_cluster_size = int(cfg.get("min_cluster_size", MIN_CLUSTER_SIZE))
        self.similarity_threshold = float(cfg.get("similarity_threshold", SIMILARITY_THRESHOLD))
        self.max_narratives = int(cfg.get("max_narratives", MAX_NARRATIVES))
        self.max_per_theme = int(cfg.get("max_per_theme", MAX_PER_THEME))
        self.single_source_penalty = float(cfg.get("single_source_penalty", SINGLE_SOURCE_PENALTY))

    def cluster_signals(self, signals: List[ProcessedSignal], now: Optional[float] = None) -> List[Narrative]:
        if len(signals) < self.min_cluster_size:
            return []
        if now is None:
            now = now_ms()

        normalized = [replace(s, keywords=normalize_keywords(s.keywords)) for s in signals]
        clusters = self.build_clusters(normalized)
        kept = [c for c in clusters if len(c.signals) >= self.min_cluster_size]
        logger.info(
            "NarrativeClusterer: %s signals -> %s clusters (%s with >= %s members)",
            len(signals), len(clusters), len(kept), self.min_cluster_size,
        )

        narratives = [self.cluster_to_narrative(c, now) for c in kept]
        narratives = self.deduplicate(narratives)
        return self.rank_and_cap(narratives)

    def build_clusters(self, signals: List[ProcessedSignal]) -> List[KeywordCluster]:
        clusters: List[KeywordCluster] = []
        assigned: Set[str] = set()

        ordered = sorted(
            signals,
            key=lambda s: s.normalized_weight + s.recency_score + s.cross_source_score,
            reverse=True,
        )
        for signal in ordered:
            if signal.id in assigned:
                continue
            assigned.add(signal.id)

            best: Optional[KeywordCluster] = None
            best_similarity = 0.0
            for cluster in clusters:
                similarity = calculate_similarity(signal.keywords, cluster.keywords)
                # strict > keeps the earliest cluster on ties
                if similarity > best_similarity and similarity >= self.similarity_threshold:
                    best_similarity = similarity
                    best = cluster

            if best is None:
                best = KeywordCluster()
                clusters.append(best)
            best.add(signal)

        return clusters

    def cluster_to_narrative(self, cluster: KeywordCluster, now: float) -> Narrative:
        signals = cluster.signals
        top = cluster.centroid[:5]
        sources = list(dict.fromkeys(s.source.value for s in signals))

        theme = identify_theme(top)
        metrics = NarrativeMetrics(
            cross_source_count=len(sources),
            velocity=self._cluster_velocity(signals, now),
            recency=self._cluster_recency(signals, now),
            key_voice_mentions=sum(
                1 for s in signals if s.source == SourceCategory.SOCIAL and s.weight >= KEY_VOICE_WEIGHT
            ),
        )
        return Narrative(
            title=format_title(theme, cluster.centroid),
            description=build_description(theme, top, len(signals), sources),
            signals=list(signals),
            keywords=list(cluster.keywords)[:NARRATIVE_KEYWORDS],
            score=self.narrative_score(metrics, len(signals)),
            metrics=metrics,
            timestamp=now,
        )

    @staticmethod
    def narrative_score(metrics: NarrativeMetrics, signal_count: int) -> float:
        return (
            metrics.cross_source_count * 20
            + metrics.velocity * 15
            + metrics.recency * 20
            + metrics.key_voice_mentions * 5
            + min(signal_count / 2, 15)
        )

    def deduplicate(self, narratives: List[Narrative]) -> List[Narrative]:
        seen_titles: Set[str] = set()
        per_theme: Dict[str, int] = defaultdict(int)
        out: List[Narrative] = []
        for n in sorted(narratives, key=lambda x: x.score, reverse=True):
            key = normalize_title(n.title)
            prefix = n.theme
            if key in seen_titles or per_theme[prefix] >= self.max_per_theme:
                logger.debug("NarrativeClusterer: dropped duplicate narrative %r", n.title)
                continue
            seen_titles.add(key)
            per_theme[prefix] += 1
            out.append(n)
        if len(out) < len(narratives):
            logger.info("NarrativeClusterer: dedup dropped %s narratives", len(narratives) - len(out))
        return out

    def rank_and_cap(self, narratives: List[Narrative]) -> List[Narrative]:
        for n in narratives:
            if n.metrics.cross_source_count < 2:
                n.score *= self.single_source_penalty
        narratives.sort(key=lambda x: x.score, reverse=True)
        return narratives[: self.max_narratives]

    @staticmethod
    def _cluster_velocity(signals: Sequence[ProcessedSignal], now: float) -> float:
        week = 7 * DAY_MS
        recent = sum(1 for s in signals if now - s.timestamp < week)
        older = sum(1 for s in signals if now - 2 * week < s.timestamp < now - week)
        if older == 0:
            return 2.0 if recent > 0 else 1.0
        return recent / older

    @staticmethod
    def _cluster_recency(signals: Sequence[ProcessedSignal], now: float) -> float:
        mean_ts = sum(s.timestamp for s in signals) / len(signals)
        return math.exp(-age_days(mean_ts, now) / CLUSTER_RECENCY_DECAY_DAYS)
