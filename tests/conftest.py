import itertools

import pytest

from processing.models import DAY_MS, ProcessedSignal, Signal

NOW = 1_760_000_000_000.0

_ids = itertools.count(1)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_signal():
    def _make(keywords=("solana", "defi"), source="github", age_days=0.0, weight=1.0, **extra):
        return Signal(
            id=extra.pop("id", f"sig_{next(_ids)}"),
            source=source,
            timestamp=NOW - age_days * DAY_MS,
            content=extra.pop("content", "Test signal content"),
            keywords=list(keywords),
            weight=weight,
            metadata=extra.pop("metadata", {}),
        )
    return _make


@pytest.fixture
def make_processed():
    def _make(keywords=("solana", "defi"), source="github", age_days=0.0, weight=1.0, **scores):
        return ProcessedSignal(
            id=scores.pop("id", f"psig_{next(_ids)}"),
            source=source,
            timestamp=NOW - age_days * DAY_MS,
            content="Test signal content",
            keywords=list(keywords),
            weight=weight,
            normalized_weight=scores.pop("normalized_weight", 0.5),
            recency_score=scores.pop("recency_score", 0.8),
            cross_source_score=scores.pop("cross_source_score", 1.0),
        )
    return _make
