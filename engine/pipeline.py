"""Pipeline: orchestrates load → score → trend summary → cluster → save.

Collection files are produced by the collectors (out of process). Everything
after loading is pure, in-memory work on one fixed batch.
"""
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from intelligence.narrative_clusterer import NarrativeClusterer
from intelligence.trend_detector import TrendDetector
from processing.models import Signal, SignalValidationError, now_ms
from processing.signal_detector import SignalDetector

logger = logging.getLogger(__name__)


def _collection_files(data_dir: str) -> List[Path]:
    root = Path(data_dir)
    if not root.is_dir():
        return []
    return sorted(
        p for p in root.iterdir()
        if p.is_file() and p.name.startswith("collection_") and p.suffix == ".json" and "_demo_" not in p.name
    )


def load_collection_files(data_dir: str) -> Dict[str, Any]:
    """Merge every collection file under data_dir, deduplicating signals by id per source.

    Returns {"signals": [...], "sources": [...], "skipped": n, "files": n}.
    """
    per_source: Dict[str, Dict[str, Signal]] = {}
    skipped = 0
    files = _collection_files(data_dir)

    for path in files:
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Skipping unreadable collection file %s: %s", path, e)
            continue
        if not isinstance(payload, dict):
            logger.warning("Skipping collection file %s: expected an object keyed by source", path)
            continue

        logger.info("Loading collection file %s", path.name)
        for source_name, result in payload.items():
            if not isinstance(result, dict):
                logger.warning("Skipping %s/%s: expected a collector result object", path.name, source_name)
                continue
            bucket = per_source.setdefault(source_name, {})
            for err in result.get("errors") or []:
                logger.info("Collector %s reported: %s", source_name, err)
            for rec in result.get("signals") or []:
                try:
                    sig = Signal.from_dict(rec)
                except SignalValidationError as e:
                    skipped += 1
                    logger.warning("Skipping malformed signal in %s/%s: %s", path.name, source_name, e)
                    continue
                bucket.setdefault(sig.id, sig)

    signals: List[Signal] = []
    for source_name, bucket in per_source.items():
        logger.info("  %s: %s signals", source_name, len(bucket))
        signals.extend(bucket.values())

    return {
        "signals": signals,
        "sources": list(per_source),
        "skipped": skipped,
        "files": len(files),
    }


def _data_window(signals: List[Signal]) -> Dict[str, float]:
    timestamps = [s.timestamp for s in signals if s.timestamp > 0]
    if not timestamps:
        return {"start": 0, "end": 0}
    return {"start": min(timestamps), "end": max(timestamps)}


def run_analysis(
    config: Dict[str, Any],
    signals: List[Signal],
    now: Optional[float] = None,
    sources_used: Optional[List[str]] = None,
) -> Dict[str, Any]:
    if now is None:
        now = now_ms()
    started = time.monotonic()

    detector = SignalDetector(config)
    processed = detector.process_signals(signals, now=now)

    trends = TrendDetector(detector, config).detect(processed, raw=signals, now=now)

    clusterer = NarrativeClusterer(config)
    narratives = clusterer.cluster_signals(processed, now=now)

    if sources_used is None:
        sources_used = list(dict.fromkeys(s.source.value for s in signals))

    metrics = {
        "event": "analysis_run",
        "total_signals": len(signals),
        "processed": len(processed),
        "anomalies": trends["anomaly_count"],
        "narratives": len(narratives),
        "elapsed_s": round(time.monotonic() - started, 3),
    }
    logger.info("ANALYSIS_METRICS %s", json.dumps(metrics))

    return {
        "narratives": narratives,
        "analyzedAt": now,
        "dataWindow": _data_window(signals),
        "stats": {
            "totalSignals": len(signals),
            "sourcesUsed": sources_used,
            "narrativesDetected": len(narratives),
        },
        "topKeywords": trends["top_keywords"],
        "trends": trends["trends"],
        "anomalyCount": trends["anomaly_count"],
    }


def analysis_to_dict(result: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(result)
    out["narratives"] = [n.to_dict() for n in result.get("narratives", [])]
    return out


def save_analysis(result: Dict[str, Any], output_path: str) -> str:
    parent = os.path.dirname(output_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(analysis_to_dict(result), f, indent=2)
    logger.info("Analysis saved to %s", output_path)
    return output_path
