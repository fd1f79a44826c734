import logging
import sys
from pathlib import Path

# Ensure repo root is on path for local runs
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from engine.pipeline import load_collection_files, run_analysis, save_analysis  # noqa: E402
from utils.config import load_config  # noqa: E402
from utils.logging import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)


def main() -> int:
    config = load_config()
    setup_logging(config)

    storage = config["storage"]
    loaded = load_collection_files(storage["data_dir"])
    signals = loaded["signals"]
    if loaded["files"] == 0:
        logger.error("No collection data found in %s. Run the collectors first.", storage["data_dir"])
        return 1
    if not signals:
        logger.error("No signals to analyze (%s malformed records skipped).", loaded["skipped"])
        return 1

    logger.info("Total signals to analyze: %s", len(signals))
    result = run_analysis(config, signals, sources_used=loaded["sources"])
    save_analysis(result, storage["output_path"])

    for i, kw in enumerate(result["topKeywords"][:10], start=1):
        logger.info("Top keyword %s. %s (score: %.2f)", i, kw["keyword"], kw["score"])
    logger.info("Detected %s anomalous signals", result["anomalyCount"])

    for i, narrative in enumerate(result["narratives"], start=1):
        logger.info(
            "%s. %s | score=%.2f signals=%s sources=%s",
            i,
            narrative.title,
            narrative.score,
            len(narrative.signals),
            narrative.metrics.cross_source_count,
        )
    logger.info("Analysis complete: %s narratives", len(result["narratives"]))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
