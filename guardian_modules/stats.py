"""
Statistics helpers shared by the analyzers
"""

import math
from typing import Iterable, List, Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for empty input"""
    if not values:
        return 0.0
    return sum(values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation.

    Returns 0.0 for fewer than two samples or when every sample is identical.
    """
    if len(values) <= 1:
        return 0.0
    if len(set(values)) == 1:
        return 0.0

    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Standard deviation divided by the mean (0.0 when the mean is 0)"""
    if len(values) <= 1:
        return 0.0
    avg = mean(values)
    if avg == 0:
        return 0.0
    return standard_deviation(values) / avg


def entropy(counts: Iterable[float]) -> float:
    """Shannon entropy (base 2) of a frequency distribution"""
    values: List[float] = list(counts)
    if not values:
        return 0.0

    total = sum(values)
    if total <= 0:
        return 0.0

    result = 0.0
    for value in values:
        if value > 0:
            probability = value / total
            result -= probability * math.log2(probability)
    return result


def intervals(values: Sequence[float]) -> List[float]:
    """Differences between consecutive samples"""
    return [values[i] - values[i - 1] for i in range(1, len(values))]
