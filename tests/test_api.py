import datetime as dt
import unittest

from fastapi.testclient import TestClient

from citydash.config import Settings
from citydash.dashboard_service import DashboardService
from citydash.data_sources.openweather_client import LiveAirQuality, LiveWeather
from citydash.errors import ProviderUnavailable
from citydash.main import create_app
from citydash.response_cache import in_memory_caches
from citydash.synthesis import no_jitter

UTC = dt.timezone.utc


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingJitter:
    """Returns a different value on every call so re-synthesis is observable."""

    def __init__(self):
        self.calls = 0

    def __call__(self, low, high):
        self.calls += 1
        return low if self.calls % 2 else high


class FakeDataSource:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []
        self.closed = False

    def fetch_weather(self, city):
        self.calls.append(("weather", city))
        if self.error is not None:
            raise self.error
        return LiveWeather(
            city="Delhi", temperature=33.2, humidity=45, description="haze", icon="50d",
            wind_speed_ms=2.5, pressure=1007,
        )

    def fetch_air_quality(self, city):
        self.calls.append(("airquality", city))
        if self.error is not None:
            raise self.error
        return LiveAirQuality(city="Delhi", index=4, pm2_5=90, pm10=130, no2=35, so2=9, co=800, o3=25)

    def close(self):
        self.closed = True


class TestApi(unittest.TestCase):
    def _client(self, *, data_source=None, jitter=no_jitter, now=None):
        self.cache_clock = FakeClock()
        self.data_source = data_source or FakeDataSource()
        settings = Settings(weather_ttl_seconds=600, air_quality_ttl_seconds=600, transport_ttl_seconds=300)
        self.caches = in_memory_caches(settings, clock=self.cache_clock)
        moment = now or dt.datetime(2024, 1, 3, 13, 0, tzinfo=UTC)
        self.service = DashboardService(self.data_source, self.caches, clock=lambda: moment, jitter=jitter)
        client = TestClient(create_app(settings, service=self.service))
        client.__enter__()
        self.addCleanup(client.__exit__, None, None, None)
        return client

    def test_missing_city_returns_400_and_caches_nothing(self):
        client = self._client()
        for path in ("/api/weather", "/api/airquality", "/api/transport", "/api/insights"):
            for query in ("", "?city=", "?city=%20%20"):
                with self.subTest(path=path, query=query):
                    resp = client.get(path + query)
                    self.assertEqual(resp.status_code, 400)
                    self.assertEqual(resp.json(), {"error": "City is required"})
        self.assertEqual(len(self.caches.weather), 0)
        self.assertEqual(len(self.caches.transport), 0)
        self.assertEqual(self.data_source.calls, [])

    def test_weather_live_provider(self):
        client = self._client()
        resp = client.get("/api/weather", params={"city": "Delhi"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["source"], "live-provider")
        self.assertEqual(body["weather"]["temp"], 33)
        self.assertEqual(body["weather"]["windSpeed"], 9)
        self.assertEqual(body["updatedAt"], "2024-01-03T13:00:00Z")
        self.assertEqual(len(body["predictions"]["nextHours"]), 6)

    def test_air_quality_live_provider(self):
        client = self._client()
        body = client.get("/api/airquality", params={"city": "Delhi"}).json()
        self.assertEqual(body["source"], "live-provider")
        self.assertEqual(body["airQuality"]["aqi"], 200)
        self.assertEqual(body["airQuality"]["status"], "Unhealthy")

    def test_provider_failure_serves_synthetic_data(self):
        for error in (ProviderUnavailable("no key"), RuntimeError("socket exploded")):
            with self.subTest(error=type(error).__name__):
                client = self._client(data_source=FakeDataSource(error=error))
                for path in ("/api/weather", "/api/airquality"):
                    resp = client.get(path, params={"city": "Delhi"})
                    self.assertEqual(resp.status_code, 200)
                    self.assertNotEqual(resp.json()["source"], "live-provider")
                    self.assertEqual(resp.json()["source"], "synthetic")

    def test_repeat_request_served_from_cache(self):
        jitter = CountingJitter()
        client = self._client(jitter=jitter)
        first = client.get("/api/transport", params={"city": "Delhi"}).json()
        calls_after_first = jitter.calls
        second = client.get("/api/transport", params={"city": " delhi "}).json()

        self.assertEqual(second["transport"]["buses"], first["transport"]["buses"])
        self.assertEqual(second, first)
        self.assertEqual(jitter.calls, calls_after_first)

        client.get("/api/weather", params={"city": "Delhi"})
        client.get("/api/weather", params={"city": "DELHI"})
        self.assertEqual(self.data_source.calls, [("weather", "Delhi")])

    def test_entry_regenerated_after_ttl(self):
        jitter = CountingJitter()
        client = self._client(jitter=jitter)
        client.get("/api/transport", params={"city": "Delhi"})
        calls_after_first = jitter.calls

        self.cache_clock.advance(299)
        client.get("/api/transport", params={"city": "Delhi"})
        self.assertEqual(jitter.calls, calls_after_first)

        self.cache_clock.advance(1)
        client.get("/api/transport", params={"city": "Delhi"})
        self.assertGreater(jitter.calls, calls_after_first)

    def test_delhi_at_night_is_cool(self):
        client = self._client(
            data_source=FakeDataSource(error=ProviderUnavailable("offline")),
            now=dt.datetime(2024, 1, 3, 2, 0, tzinfo=UTC),
        )
        body = client.get("/api/weather", params={"city": "Delhi"}).json()
        self.assertIn("cool", body["weather"]["desc"].lower())
        self.assertEqual(len(body["predictions"]["nextHours"]), 6)

        transport = client.get("/api/transport", params={"city": "Delhi"}).json()
        self.assertEqual(transport["transport"]["traffic"], "Very Low")
        self.assertNotIn("city", transport)

    def test_insights(self):
        client = self._client()
        resp = client.get("/api/insights", params={"city": "  Delhi "})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["city"], "Delhi")
        self.assertEqual(body["generatedAt"], "2024-01-03T13:00:00Z")
        self.assertTrue(body["insights"])
        types = {i["type"] for i in body["insights"]}
        # Live AQI of 200 and a 33°C reading both trip a rule.
        self.assertIn("airquality", types)
        self.assertIn("weather", types)

    def test_insights_reuse_cached_domain_payloads(self):
        client = self._client()
        client.get("/api/weather", params={"city": "Delhi"})
        client.get("/api/insights", params={"city": "Delhi"})
        self.assertEqual(self.data_source.calls.count(("weather", "Delhi")), 1)


if __name__ == "__main__":
    unittest.main()
