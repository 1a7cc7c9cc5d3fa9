import math
import random

import pytest

from farm_analytics.utils import numeric, retry


@pytest.mark.parametrize(
    "value, expected",
    [
        (66.66666, 66.67),
        (0.125, 0.13),
        (0.375, 0.38),
        (-0.125, -0.13),
        (0.004, 0.0),
        (375, 375.0),
    ],
)
def test_round2_rounds_half_away_from_zero(value, expected):
    assert numeric.round2(value) == pytest.approx(expected)


def test_round2_is_idempotent():
    for value in (0.125, 1 / 3, -2.5049, 1234.5678, 99.995, -0.005):
        once = numeric.round2(value)
        assert numeric.round2(once) == once


@pytest.mark.parametrize("value", [74201874713235.89, 5e13 + 0.125, 2.0**53 + 2, 1.7e307, -1.7e308])
def test_round2_handles_large_magnitudes(value):
    once = numeric.round2(value)

    assert math.isfinite(once)
    assert numeric.round2(once) == once


def test_round2_is_idempotent_across_magnitudes():
    rng = random.Random(20240131)
    for _ in range(2000):
        value = rng.uniform(-1, 1) * 10 ** rng.randint(-4, 18)
        once = numeric.round2(value)
        assert numeric.round2(once) == once


def test_round2_never_returns_negative_zero():
    result = numeric.round2(-0.001)
    assert result == 0.0
    assert math.copysign(1, result) == 1


def test_safe_divide_returns_zero_for_zero_denominator():
    assert numeric.safe_divide(10, 0) == 0.0
    assert numeric.safe_divide(10, -2) == 0.0
    assert numeric.safe_divide(10, 4) == 2.5


def test_percentage_is_rounded_and_guarded():
    assert numeric.percentage(1, 3) == 33.33
    assert numeric.percentage(5, 0) == 0.0


def test_mean_of_empty_sequence_is_zero():
    assert numeric.mean([]) == 0.0
    assert numeric.mean([100, 50]) == 75


def test_coerce_amount_treats_none_as_zero():
    assert numeric.coerce_amount(None) == 0.0
    assert numeric.coerce_amount(4) == 4


def test_retry_decorator_retries_specified_attempts():
    calls = {"count": 0}
    delays = []

    @retry.retry(attempts=3, delay=0.01, sleep=delays.append)
    def flaky():
        calls["count"] += 1
        if calls["count"] < 3:
            raise ValueError("fail")
        return "ok"

    assert flaky() == "ok"
    assert calls["count"] == 3
    assert delays == pytest.approx([0.01, 0.02])


def test_retry_decorator_reraises_after_last_attempt():
    calls = {"count": 0}

    @retry.retry(attempts=2, delay=0, sleep=lambda _: None)
    def always_fails():
        calls["count"] += 1
        raise ValueError("fail")

    with pytest.raises(ValueError):
        always_fails()
    assert calls["count"] == 2


def test_retry_decorator_ignores_unlisted_exceptions():
    calls = {"count": 0}

    @retry.retry(attempts=3, exceptions=(KeyError,), sleep=lambda _: None)
    def wrong_error():
        calls["count"] += 1
        raise ValueError("fail")

    with pytest.raises(ValueError):
        wrong_error()
    assert calls["count"] == 1


def test_retry_rejects_non_positive_attempts():
    with pytest.raises(ValueError):
        retry.retry(attempts=0)


def test_backoff_delays_are_capped():
    assert retry.backoff_delays(5, 1, 3, max_delay=5) == [1, 3, 5, 5]
    assert retry.backoff_delays(1, 1, 2) == []
