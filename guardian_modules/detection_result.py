"""
Detection result and pipeline step types
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union


CONFIDENCE_LEVELS: List[Tuple[str, int, int]] = [
    ("low", 0, 39),
    ("medium", 40, 59),
    ("high", 60, 79),
    ("very_high", 80, 100),
]

DEFAULT_THRESHOLD = 60


def _clamp(score: float) -> int:
    return int(min(100, max(0, score)))


class DetectionResult:
    """Score (0-100) plus the named signals that produced it"""

    def __init__(self, score: float = 0, signals: Optional[Dict[str, Any]] = None,
                 threshold: int = DEFAULT_THRESHOLD):
        self.score = _clamp(score)
        self.signals: Dict[str, Any] = dict(signals or {})
        self.threshold = threshold

    def is_detected(self) -> bool:
        """Whether the score reaches the detection threshold"""
        return self.score >= self.threshold

    @property
    def detected(self) -> bool:
        return self.is_detected()

    def confidence_level(self) -> str:
        for level, low, high in CONFIDENCE_LEVELS:
            if low <= self.score <= high:
                return level
        return "unknown"

    def add_signal(self, name: str, value: Any = True, weight: float = 1) -> "DetectionResult":
        """Record a signal and add its weight to the score"""
        self.signals[name] = value
        return self.adjust_score(weight)

    def adjust_score(self, weight: float) -> "DetectionResult":
        self.score = _clamp(self.score + int(weight))
        return self

    def increase_score(self, amount: float) -> "DetectionResult":
        return self.adjust_score(amount)

    def top_signals(self, limit: int = 5) -> Dict[str, float]:
        """Most significant signals, numeric values first.

        Non-numeric values (and booleans) count as weight 1. Ties keep their
        insertion order.
        """
        weights = {}
        for name, value in self.signals.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                weights[name] = value
            else:
                weights[name] = 1

        ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
        return dict(ranked[:limit])

    def merge(self, other: "DetectionResult") -> "DetectionResult":
        """Add another result's score and take its signals.

        Signals from ``other`` overwrite signals with the same name.
        """
        self.score = _clamp(self.score + other.score)
        self.signals.update(other.signals)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "signals": self.signals,
            "detected": self.is_detected(),
            "confidence": self.confidence_level(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], threshold: int = DEFAULT_THRESHOLD) -> "DetectionResult":
        return cls(data.get("score", 0), data.get("signals", {}), threshold)

    def __repr__(self) -> str:
        return f"DetectionResult(score={self.score}, signals={self.signals!r})"


@dataclass(frozen=True)
class Continue:
    """Pipeline keeps going with this partial result"""
    result: DetectionResult


@dataclass(frozen=True)
class Terminal:
    """Pipeline stops and returns this result"""
    result: DetectionResult


PipelineStep = Union[Continue, Terminal]
