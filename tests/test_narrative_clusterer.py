import math

import pytest

from intelligence.narrative_clusterer import (
    NarrativeClusterer,
    calculate_similarity,
    normalize_title,
    update_centroid,
)
from processing.models import Narrative, NarrativeMetrics

SOURCES = ("github", "onchain", "discord")


@pytest.fixture
def clusterer():
    return NarrativeClusterer()


def _cluster_batch(make_processed, keywords, age_days=0.0, sources=SOURCES):
    return [make_processed(keywords=keywords, source=src, age_days=age_days) for src in sources]


def test_too_few_signals_returns_empty(clusterer, make_processed, now):
    assert clusterer.cluster_signals([make_processed(), make_processed()], now=now) == []


def test_similar_signals_form_one_narrative(clusterer, make_processed, now):
    signals = [
        make_processed(keywords=["jupiter", "dex", "swap", "defi"], source="github"),
        make_processed(keywords=["jupiter", "dex", "aggregator", "defi"], source="onchain"),
        make_processed(keywords=["jupiter", "swap", "trading", "defi"], source="discord"),
    ]
    narratives = clusterer.cluster_signals(signals, now=now)
    assert len(narratives) == 1
    narrative = narratives[0]
    assert "jupiter" in narrative.keywords
    assert narrative.metrics.cross_source_count == 3
    assert len(narrative.signals) == 3
    assert narrative.ideas == []
    assert narrative.title == "DeFi: Jupiter Surge"


def test_similarity_properties():
    a = ["jupiter", "dex", "routing"]
    b = ["jupiter", "volume"]
    assert calculate_similarity(a, b) == calculate_similarity(b, a)
    assert 0.0 <= calculate_similarity(a, b) <= 1.0
    assert calculate_similarity(a, list(a)) == 1.0
    assert calculate_similarity(a, []) == 0.0
    assert calculate_similarity([], []) == 0.0


def test_similarity_weights_ecosystem_terms():
    # jupiter weighs 2, the others 1: 2 / (2 + 1 + 1)
    assert calculate_similarity(["jupiter", "x-one"], ["jupiter", "y-two"]) == 0.5
    assert calculate_similarity(["routing", "x-one"], ["routing", "y-two"]) == pytest.approx(1 / 3)


def test_centroid_counts_ecosystem_terms_double_and_keeps_first_seen_ties(make_processed):
    signals = [
        make_processed(keywords=["routing", "jupiter"]),
        make_processed(keywords=["routing", "volume"]),
    ]
    assert update_centroid(signals) == ["routing", "jupiter", "volume"]


def test_centroid_is_capped(make_processed):
    signals = [make_processed(keywords=[f"kw-{i}" for i in range(12)])]
    assert len(update_centroid(signals)) == 10


def test_dissimilar_signal_starts_new_cluster(clusterer, make_processed):
    signals = [
        make_processed(keywords=["jupiter", "dex"]),
        make_processed(keywords=["helium", "hivemapper"]),
        make_processed(keywords=["jupiter", "dex", "routing"]),
    ]
    clusters = clusterer.build_clusters(signals)
    assert [len(c.signals) for c in clusters] == [2, 1]


def test_signal_joins_most_similar_cluster(clusterer, make_processed):
    first = make_processed(keywords=["jupiter", "routing"], normalized_weight=1.0)
    second = make_processed(keywords=["kamino", "vaults"], normalized_weight=0.9)
    joiner = make_processed(keywords=["kamino", "vaults", "routing"], normalized_weight=0.1)
    clusters = clusterer.build_clusters([joiner, second, first])
    assert [s.id for s in clusters[1].signals] == [second.id, joiner.id]


def test_duplicate_ids_are_assigned_once(clusterer, make_processed):
    sig = make_processed(keywords=["jupiter", "dex"], id="dup")
    clusters = clusterer.build_clusters([sig, sig, sig])
    assert sum(len(c.signals) for c in clusters) == 1


def test_multi_source_narrative_outranks_single_source(clusterer, make_processed, now):
    multi = [
        make_processed(keywords=["jupiter", "dex", "defi"], source="github"),
        make_processed(keywords=["jupiter", "dex", "swap"], source="onchain"),
        make_processed(keywords=["jupiter", "aggregator", "defi"], source="discord"),
    ]
    single = [
        make_processed(keywords=["helium", "depin", "iot"], source="github"),
        make_processed(keywords=["helium", "depin", "network"], source="github"),
        make_processed(keywords=["helium", "depin", "wireless"], source="github"),
    ]
    narratives = clusterer.cluster_signals(multi + single, now=now)
    assert len(narratives) == 2
    jupiter = next(n for n in narratives if "jupiter" in n.keywords)
    helium = next(n for n in narratives if "helium" in n.keywords)
    assert jupiter.score > helium.score
    assert helium.metrics.cross_source_count == 1
    unpenalized = clusterer.narrative_score(helium.metrics, 3)
    assert helium.score == pytest.approx(unpenalized * 0.4)


THEMED_CLUSTERS = [
    (("jupiter", "lending"), "DeFi"),
    (("jito", "marinade"), "Liquid Staking"),
    (("metaplex", "compressed-nfts"), "NFTs"),
    (("gaming", "metaverse"), "Gaming"),
    (("firedancer", "validator"), "Infrastructure"),
    (("stablecoin", "merchant"), "Payments"),
    (("saga", "smartphone"), "Mobile"),
    (("helium", "hivemapper"), "DePIN"),
    (("inference", "nosana"), "AI & Agents"),
    (("anchor", "sdk"), "Developer Tools"),
    (("transfer-hook", "token-2022"), "Token Extensions"),
    (("wormhole", "cross-chain"), "Cross-Chain"),
]


def test_output_is_capped_and_sorted(clusterer, make_processed, now):
    signals = []
    for i, (keywords, _) in enumerate(THEMED_CLUSTERS):
        # older clusters score lower through recency
        signals.extend(_cluster_batch(make_processed, keywords, age_days=i * 0.5))

    narratives = clusterer.cluster_signals(signals, now=now)

    assert len(narratives) == 10
    scores = [n.score for n in narratives]
    assert scores == sorted(scores, reverse=True)
    assert [n.theme for n in narratives] == [theme for _, theme in THEMED_CLUSTERS[:10]]
    assert len({normalize_title(n.title) for n in narratives}) == len(narratives)


def test_many_topics_never_exceed_cap(clusterer, make_processed, now):
    topics = ["jupiter", "jito", "drift", "tensor", "kamino", "raydium", "orca", "pyth", "helium", "phantom"]
    signals = [
        make_processed(keywords=[topic, "solana", f"keyword-{topic}-{i}"], source=SOURCES[i])
        for topic in topics
        for i in range(3)
    ]
    narratives = clusterer.cluster_signals(signals, now=now)
    assert len(narratives) <= 10
    prefixes = [n.theme for n in narratives]
    assert all(prefixes.count(p) <= 2 for p in prefixes)


def test_at_most_two_narratives_per_theme(clusterer, make_processed, now):
    signals = []
    for keywords in (("jupiter", "lending"), ("kamino", "yield"), ("drift", "perps")):
        signals.extend(_cluster_batch(make_processed, keywords))
    narratives = clusterer.cluster_signals(signals, now=now)
    assert [n.theme for n in narratives] == ["DeFi", "DeFi"]


def _narrative(title, score, sources=3):
    return Narrative(
        title=title,
        description="",
        signals=[],
        keywords=[],
        score=score,
        metrics=NarrativeMetrics(cross_source_count=sources, velocity=1.0, recency=1.0, key_voice_mentions=0),
    )


def test_deduplicate_drops_repeated_titles(clusterer):
    kept = clusterer.deduplicate([
        _narrative("DeFi: Jupiter Surge", 10.0),
        _narrative("DeFi: jupiter surge!", 50.0),
        _narrative("NFTs: Tensor Wave", 20.0),
    ])
    assert [(n.title, n.score) for n in kept] == [("DeFi: jupiter surge!", 50.0), ("NFTs: Tensor Wave", 20.0)]


def test_rank_and_cap_penalizes_single_source():
    clusterer = NarrativeClusterer({"clustering": {"max_narratives": 2}})
    ranked = clusterer.rank_and_cap([
        _narrative("A: One Rise", 100.0, sources=1),
        _narrative("B: Two Rise", 50.0, sources=2),
        _narrative("C: Three Rise", 45.0, sources=3),
    ])
    assert [n.title for n in ranked] == ["B: Two Rise", "C: Three Rise"]


def test_metrics(clusterer, make_processed, now):
    signals = [
        make_processed(keywords=["jupiter", "dex"], source="twitter", age_days=1, weight=3.0),
        make_processed(keywords=["jupiter", "dex"], source="twitter", age_days=2, weight=2.0),
        make_processed(keywords=["jupiter", "dex"], source="github", age_days=9, weight=4.0),
    ]
    (narrative,) = clusterer.cluster_signals(signals, now=now)
    metrics = narrative.metrics
    assert metrics.velocity == 2.0
    assert metrics.recency == pytest.approx(math.exp(-4 / 10))
    assert metrics.key_voice_mentions == 1
    assert metrics.cross_source_count == 2
    expected = 2 * 20 + 2.0 * 15 + metrics.recency * 20 + 1 * 5 + 1.5
    assert narrative.score == pytest.approx(expected)


def test_velocity_without_recent_or_older_signals(clusterer, make_processed, now):
    stale = [make_processed(keywords=["jupiter", "dex"], source=src, age_days=20) for src in SOURCES]
    (narrative,) = clusterer.cluster_signals(stale, now=now)
    assert narrative.metrics.velocity == 1.0


def test_signal_count_bonus_is_capped(clusterer):
    metrics = NarrativeMetrics(cross_source_count=0, velocity=0.0, recency=0.0, key_voice_mentions=0)
    assert clusterer.narrative_score(metrics, 100) == 15


def test_narrative_keywords_are_truncated(clusterer, make_processed, now):
    signals = [
        make_processed(keywords=["jupiter", "dex", "solana"] + [f"word-{src}-{i}" for i in range(5)], source=src)
        for src in SOURCES
    ]
    (narrative,) = clusterer.cluster_signals(signals, now=now)
    assert len(narrative.keywords) == 15
