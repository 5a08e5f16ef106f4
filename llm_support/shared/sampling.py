"""Percentage-to-range mapping for sampling parameters.

Callers describe sampling knobs as a 0-100 percentage ("creativity: 70")
and providers expect values on their own scale (temperature 0-2, top-p 0-1).
map_to_range() converts between the two; percentages above 100 are capped,
lower values are passed through the formula as-is.
"""

from llm_support.config import PERCENT_MAX, TEMPERATURE_RANGE, TOP_P_RANGE


def map_to_range(min_value: int, max_value: int, target: int) -> float:
    """Pick the point of [min_value, max_value] that target percent maps to.

    Args:
        min_value: Lower end of the range.
        max_value: Upper end of the range (>= min_value).
        target: Percentage, capped at 100.

    Returns:
        min_value + (max_value - min_value) * target / 100 as a float.
        A degenerate range (min_value == max_value) always yields min_value.

    Example:
        >>> map_to_range(10, 20, 50)
        15.0
        >>> map_to_range(0, 100, 3000)
        100.0
    """
    capped_target = min(target, PERCENT_MAX)

    span = float(max_value) - float(min_value)
    percentage = capped_target / 100.0
    return float(min_value) + span * percentage


def percent_to_temperature(
    target: int,
    temperature_range: tuple[int, int] = TEMPERATURE_RANGE,
) -> float:
    """Map a 0-100 creativity percentage onto the temperature range."""
    return map_to_range(*temperature_range, target)


def percent_to_top_p(target: int, top_p_range: tuple[int, int] = TOP_P_RANGE) -> float:
    return map_to_range(*top_p_range, target)
