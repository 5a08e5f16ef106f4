from llm_support.shared.sampling import (
    map_to_range,
    percent_to_temperature,
    percent_to_top_p,
)


def test_target_at_min():
    assert map_to_range(0, 100, 0) == 0.0
    assert map_to_range(10, 20, 0) == 10.0


def test_target_at_max():
    assert map_to_range(0, 100, 100) == 100.0
    assert map_to_range(10, 20, 100) == 20.0


def test_target_in_middle():
    assert map_to_range(0, 100, 50) == 50.0
    assert map_to_range(10, 20, 50) == 15.0
    assert map_to_range(0, 1, 50) == 0.5


def test_target_above_100_is_capped():
    assert map_to_range(0, 100, 3000) == 100.0
    assert map_to_range(0, 100, 200) == 100.0
    assert map_to_range(10, 20, 200) == 20.0


def test_zero_range_returns_min():
    assert map_to_range(10, 10, 50) == 10.0
    assert map_to_range(5, 5, 100) == 5.0
    assert map_to_range(5, 5, 1000) == 5.0


def test_negative_target_is_not_clamped():
    assert map_to_range(10, 20, -50) == 5.0


def test_result_is_monotonic_in_target():
    results = [map_to_range(3, 17, target) for target in range(-10, 150)]
    assert results == sorted(results)


def test_result_is_float():
    assert isinstance(map_to_range(0, 100, 100), float)


def test_percent_to_temperature_uses_configured_range():
    assert percent_to_temperature(0) == 0.0
    assert percent_to_temperature(50) == 1.0
    assert percent_to_temperature(150) == 2.0
    assert percent_to_temperature(50, temperature_range=(0, 1)) == 0.5


def test_percent_to_top_p():
    assert percent_to_top_p(30) == 0.3
    assert percent_to_top_p(100) == 1.0
