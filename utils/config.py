import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"

DEFAULT_DATA_DIR = "./data/raw"
DEFAULT_OUTPUT_PATH = "./data/processed/narratives.json"


def _env_csv(name: str) -> list[str] | None:
    """Parse a comma-separated env var.

    Returns None if the env var is unset OR empty/whitespace (meaning: no override).
    """
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    return [s.strip() for s in v.split(",") if s.strip()]


def _env_number(name: str, default: Any, cast=float):
    v = os.getenv(name)
    if v is None or not v.strip():
        return cast(default)
    return cast(v.strip())


def _merge_unique(base: list[str], extra: list[str] | None) -> list[str]:
    out = list(base)
    if extra:
        seen = set(out)
        for s in extra:
            if s not in seen:
                out.append(s)
                seen.add(s)
    return out


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
    config: Dict[str, Any] = {}
    if settings_path.exists():
        with open(settings_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

    config.setdefault("logging", {})
    config["logging"]["level"] = os.getenv("LOG_LEVEL", config["logging"].get("level", "INFO"))

    config.setdefault("analysis", {})
    analysis = config["analysis"]
    analysis["top_keywords"] = _env_number("TOP_KEYWORDS", analysis.get("top_keywords", 30), int)
    analysis.setdefault("trend_keywords", 10)
    analysis.setdefault("velocity_window_days", 7)

    config.setdefault("scoring", {})
    config["scoring"]["extra_stop_keywords"] = _merge_unique(
        config["scoring"].get("extra_stop_keywords") or [],
        _env_csv("EXTRA_STOP_KEYWORDS"),
    )

    # Clustering knobs. Defaults mirror the constants in intelligence.narrative_clusterer.
    config.setdefault("clustering", {})
    clustering = config["clustering"]
    clustering["min_cluster_size"] = _env_number("MIN_CLUSTER_SIZE", clustering.get("min_cluster_size", 3), int)
    clustering["similarity_threshold"] = _env_number(
        "SIMILARITY_THRESHOLD", clustering.get("similarity_threshold", 0.25), float
    )
    clustering["max_narratives"] = _env_number("MAX_NARRATIVES", clustering.get("max_narratives", 10), int)
    clustering.setdefault("max_per_theme", 2)
    clustering.setdefault("single_source_penalty", 0.4)

    config.setdefault("storage", {})
    config["storage"]["data_dir"] = os.getenv("DATA_DIR", config["storage"].get("data_dir") or DEFAULT_DATA_DIR)
    config["storage"]["output_path"] = os.getenv(
        "OUTPUT_PATH", config["storage"].get("output_path") or DEFAULT_OUTPUT_PATH
    )
    return config
