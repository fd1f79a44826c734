from typing import Any, Dict, List, Optional

from processing.models import ProcessedSignal, Signal
from processing.signal_detector import SignalDetector


class TrendDetector:
    def __init__(self, detector: Optional[SignalDetector] = None, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.detector = detector or SignalDetector(self.config)

    def detect(
        self,
        processed: List[ProcessedSignal],
        raw: Optional[List[Signal]] = None,
        now: Optional[float] = None,
    ) -> Dict[str, Any]:
        # Top keywords by accumulated signal score, plus velocity for the leaders
        analysis = self.config.get("analysis", {})
        top_n = int(analysis.get("top_keywords", 30))
        trend_n = int(analysis.get("trend_keywords", 10))
        window = float(analysis.get("velocity_window_days", 7))

        top = self.detector.extract_top_keywords(processed, top_n)
        trends = []
        for entry in top[:trend_n]:
            trends.append({
                "keyword": entry["keyword"],
                "score": round(entry["score"], 4),
                "velocity": self.detector.calculate_velocity(processed, entry["keyword"], window, now=now),
            })
        anomalies = self.detector.detect_anomalies(raw if raw is not None else processed)
        return {"top_keywords": top, "trends": trends, "anomaly_count": len(anomalies)}
