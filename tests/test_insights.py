import datetime as dt
import unittest

from citydash.domain import InsightSeverity
from citydash.insights import build_insights

UTC = dt.timezone.utc
MIDDAY = dt.datetime(2024, 1, 3, 13, 0, tzinfo=UTC)


def _payloads(temp=22, humidity=50, aqi=75, traffic="Moderate", wait=7):
    return (
        {"weather": {"temp": temp, "humidity": humidity}},
        {"airQuality": {"aqi": aqi}},
        {"transport": {"traffic": traffic, "avgWaitTime": wait}},
    )


class TestBuildInsights(unittest.TestCase):
    def _by_type(self, insights, kind):
        return [i for i in insights if i.type == kind]

    def test_default_insight_when_nothing_stands_out(self):
        insights = build_insights(*_payloads(), MIDDAY)
        self.assertEqual(len(insights), 1)
        self.assertEqual(insights[0].type, "general")
        self.assertEqual(insights[0].severity, InsightSeverity.INFO)

    def test_hot_and_humid(self):
        insights = build_insights(*_payloads(temp=36, humidity=85), MIDDAY)
        weather = self._by_type(insights, "weather")
        self.assertEqual(len(weather), 2)
        self.assertEqual(weather[0].severity, InsightSeverity.WARNING)
        self.assertIn("36°C", weather[0].message)

    def test_cool_weather(self):
        insights = build_insights(*_payloads(temp=12), MIDDAY)
        self.assertEqual(self._by_type(insights, "weather")[0].severity, InsightSeverity.INFO)

    def test_air_quality_bands(self):
        cases = ((180, InsightSeverity.DANGER), (120, InsightSeverity.WARNING), (40, InsightSeverity.SUCCESS))
        for aqi, severity in cases:
            with self.subTest(aqi=aqi):
                air = self._by_type(build_insights(*_payloads(aqi=aqi), MIDDAY), "airquality")
                self.assertEqual([i.severity for i in air], [severity])
        self.assertEqual(self._by_type(build_insights(*_payloads(aqi=75), MIDDAY), "airquality"), [])

    def test_transport_rules(self):
        heavy = self._by_type(build_insights(*_payloads(traffic="Very High", wait=12), MIDDAY), "transport")
        self.assertEqual([i.severity for i in heavy], [InsightSeverity.WARNING, InsightSeverity.WARNING])

        light = self._by_type(build_insights(*_payloads(traffic="Low", wait=4), MIDDAY), "transport")
        self.assertEqual([i.severity for i in light], [InsightSeverity.SUCCESS, InsightSeverity.SUCCESS])

    def test_time_of_day(self):
        for hour, word in ((7, "Morning"), (18, "Evening"), (23, "night"), (3, "night")):
            with self.subTest(hour=hour):
                insights = build_insights(*_payloads(), dt.datetime(2024, 1, 3, hour, tzinfo=UTC))
                general = self._by_type(insights, "general")
                self.assertEqual(len(general), 1)
                self.assertIn(word, general[0].message)

    def test_tolerates_missing_sections(self):
        insights = build_insights({}, {}, {}, MIDDAY)
        self.assertEqual(len(insights), 1)


if __name__ == "__main__":
    unittest.main()
