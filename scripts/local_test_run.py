import sys
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
import json
import os

from utils.config import load_config
from utils.logging import setup_logging
from engine.demo_data import demo_collection
from engine.pipeline import load_collection_files, run_analysis, save_analysis


def seed_demo_collection(data_dir: str) -> str:
    # Demo file names skip the "_demo_" filter so the loader picks them up.
    os.makedirs(data_dir, exist_ok=True)
    path = os.path.join(data_dir, "collection_localrun.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(demo_collection(), f, indent=2)
    return path


def run():
    cfg = load_config()
    setup_logging(cfg)
    data_dir = os.path.join(str(ROOT), ".cache", "local_run", "raw")
    out_path = os.path.join(str(ROOT), ".cache", "local_run", "narratives.json")

    seed_demo_collection(data_dir)
    loaded = load_collection_files(data_dir)
    result = run_analysis(cfg, loaded["signals"], sources_used=loaded["sources"])
    save_analysis(result, out_path)

    for n in result["narratives"]:
        print(f"{n.score:6.2f}  {n.title}")
        print(f"        {n.description}")
    print(f"anomalies={result['anomalyCount']} narratives={len(result['narratives'])} -> {out_path}")


if __name__ == "__main__":
    run()
