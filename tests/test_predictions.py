import datetime as dt
import unittest

from citydash.predictions import classify_trend, forecast_instants, project_hourly
from citydash.synthesis import no_jitter

UTC = dt.timezone.utc


class TestForecastInstants(unittest.TestCase):
    def test_six_hourly_instants_after_now(self):
        now = dt.datetime(2024, 1, 3, 21, 15, tzinfo=UTC)
        instants = forecast_instants(now)
        self.assertEqual(len(instants), 6)
        self.assertEqual(instants[0], now + dt.timedelta(hours=1))
        self.assertEqual(instants[-1].hour, 3)


class TestProjectHourly(unittest.TestCase):
    def test_flat_modulation_repeats_current(self):
        now = dt.datetime(2024, 1, 3, 10, tzinfo=UTC)
        values = project_hourly(20, now, lambda m: 0.0, jitter=no_jitter, noise=1, low=-30, high=60)
        self.assertEqual(values, [20] * 6)

    def test_shifts_modulation_from_now_to_target_hour(self):
        now = dt.datetime(2024, 1, 3, 10, tzinfo=UTC)
        values = project_hourly(20, now, lambda m: float(m.hour), jitter=no_jitter, noise=1, low=-30, high=60)
        self.assertEqual(values, [21, 22, 23, 24, 25, 26])

    def test_clamps_and_applies_noise(self):
        now = dt.datetime(2024, 1, 3, 10, tzinfo=UTC)
        calls = []

        def jitter(low, high):
            calls.append((low, high))
            return high

        values = project_hourly(58, now, lambda m: 0.0, jitter=jitter, noise=5, low=-30, high=60)
        self.assertEqual(values, [60] * 6)
        self.assertEqual(calls, [(-5, 5)] * 6)


class TestClassifyTrend(unittest.TestCase):
    def test_rising_falling_steady(self):
        kwargs = {"rising": "warming", "falling": "cooling"}
        self.assertEqual(classify_trend(20, [23] * 6, 2, **kwargs), "warming")
        self.assertEqual(classify_trend(20, [17] * 6, 2, **kwargs), "cooling")
        self.assertEqual(classify_trend(20, [21, 22, 19, 20, 20, 21], 2, **kwargs), "stable")

    def test_threshold_is_exclusive(self):
        self.assertEqual(classify_trend(20, [22] * 6, 2, rising="up", falling="down"), "stable")

    def test_empty_values_are_steady(self):
        self.assertEqual(classify_trend(20, [], 2, rising="up", falling="down"), "stable")


if __name__ == "__main__":
    unittest.main()
