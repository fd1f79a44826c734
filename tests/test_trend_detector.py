from intelligence.trend_detector import TrendDetector


def test_detect_summarizes_keywords_and_velocity(make_processed, now):
    batch = [
        make_processed(keywords=["jito", "liquid-staking"], age_days=1),
        make_processed(keywords=["jito"], age_days=2),
        make_processed(keywords=["jupiter"], age_days=10),
    ]
    config = {"analysis": {"top_keywords": 2, "trend_keywords": 1, "velocity_window_days": 7}}

    summary = TrendDetector(config=config).detect(batch, now=now)

    assert [t["keyword"] for t in summary["top_keywords"]] == ["jito", "liquid-staking"]
    assert len(summary["trends"]) == 1
    assert summary["trends"][0]["keyword"] == "jito"
    assert summary["trends"][0]["velocity"] == 2.0
    assert summary["anomaly_count"] == 0


def test_detect_empty_batch():
    summary = TrendDetector().detect([])
    assert summary == {"top_keywords": [], "trends": [], "anomaly_count": 0}
