import math
from typing import Any, Dict, List, Optional, Tuple

# Declaration order doubles as the tie-break order: the first declared metric wins.
METRICS: List[Tuple[str, str]] = [
    ("flow_continuity", "Flow Continuity"),
    ("pause_control", "Pause Control"),
    ("vocal_confidence", "Vocal Confidence"),
    ("visual_confidence", "Visual Confidence"),
]

SCORE_SENTINEL = 101


def score_field(metric_key: str) -> str:
    return f"{metric_key}_score"


def metric_label(metric_key: str) -> str:
    return dict(METRICS)[metric_key]


def find_weakest_metric(scores: Dict[str, Any]) -> Tuple[str, float]:
    """Return the key and score of the lowest-scored metric.

    `scores` is keyed by score field (``pause_control_score``...). Missing or
    null scores count as 0. Equal minima resolve to the metric declared first.
    """
    weakest_key = ""
    weakest_score: float = SCORE_SENTINEL
    for key, _ in METRICS:
        value = scores.get(score_field(key)) or 0
        if value < weakest_score:
            weakest_key, weakest_score = key, value
    return weakest_key, weakest_score


def find_strongest_metric(averages: Dict[str, float]) -> Optional[str]:
    """Return the label of the highest average, first declared on ties."""
    best_label = None
    best_value = -1.0
    for key, label in METRICS:
        value = averages.get(key)
        if value is not None and value > best_value:
            best_label, best_value = label, value
    return best_label


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rounded_mean(values: List[float]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def overall_score(scores: Dict[str, Any]) -> int:
    return rounded_mean([scores.get(score_field(key)) or 0 for key, _ in METRICS])
