import datetime as dt
import unittest
from unittest.mock import patch

from citydash.config import Settings
from citydash.dashboard_service import DashboardService, zone_clock
from citydash.data_sources.base import OfflineDataSource
from citydash.domain import SourceTag
from citydash.domains import transport
from citydash.errors import MissingParameter
from citydash.response_cache import InMemoryResponseCache, in_memory_caches
from citydash.synthesis import no_jitter

NOW = dt.datetime(2024, 1, 3, 8, 0, tzinfo=dt.timezone.utc)


class ClosingSource(OfflineDataSource):
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class TestDashboardService(unittest.TestCase):
    def _service(self, source=None):
        return DashboardService(
            source or OfflineDataSource(), in_memory_caches(Settings()), clock=lambda: NOW, jitter=no_jitter
        )

    def test_offline_resolves_synthetic(self):
        service = self._service()
        self.assertEqual(service.weather_for("Pune").source, SourceTag.SYNTHETIC)
        self.assertEqual(service.air_quality_for("Pune").source, SourceTag.SYNTHETIC)
        resolved = service.transport_for("Pune")
        self.assertEqual(resolved.source, SourceTag.SYNTHETIC)
        self.assertEqual(resolved.payload["transport"]["traffic"], "High")

    def test_domains_use_separate_caches(self):
        service = self._service()
        service.weather_for("Pune")
        self.assertEqual(len(service.caches.weather), 1)
        self.assertEqual(len(service.caches.air_quality), 0)
        self.assertEqual(len(service.caches.transport), 0)

    def test_clearing_caches_forces_regeneration(self):
        service = self._service()
        service.weather_for("Pune")
        service.transport_for("Pune")
        service.caches.clear()
        self.assertEqual(len(service.caches.weather), 0)
        self.assertEqual(len(service.caches.transport), 0)
        self.assertFalse(service.weather_for("Pune").cache_hit)

    def test_mutating_a_response_does_not_leak_into_the_cache(self):
        service = self._service()
        first = service.transport_for("Delhi")
        buses = first.payload["transport"]["buses"]
        first.payload["transport"]["buses"] = -999

        second = service.transport_for("Delhi")
        self.assertTrue(second.cache_hit)
        self.assertEqual(second.payload["transport"]["buses"], buses)

    def test_synthesis_failure_serves_static_transport(self):
        service = self._service()
        with patch.object(transport, "transport_baseline", side_effect=ArithmeticError("bad")):
            resolved = service.transport_for("Pune")
        self.assertEqual(resolved.source, SourceTag.STATIC_FALLBACK)
        self.assertEqual(resolved.payload["transport"]["buses"], 35)
        self.assertEqual(len(service.caches.transport), 0)

    def test_insights_payload(self):
        payload = self._service().insights_for(" Pune ")
        self.assertEqual(payload["city"], "Pune")
        self.assertEqual(payload["generatedAt"], "2024-01-03T08:00:00Z")
        self.assertTrue(payload["insights"])
        self.assertTrue(any("Morning" in i["message"] for i in payload["insights"]))

    def test_insights_require_city(self):
        with self.assertRaises(MissingParameter):
            self._service().insights_for(None)

    def test_close_releases_resources(self):
        source = ClosingSource()
        service = self._service(source)
        service.transport_for("Pune")
        service.close()
        self.assertTrue(source.closed)
        self.assertEqual(len(service.caches.transport), 0)

    def test_from_settings_offline(self):
        service = DashboardService.from_settings(Settings(data_source="offline", cache_redis_url=None))
        self.assertIsInstance(service.data_source, OfflineDataSource)
        self.assertIsInstance(service.caches.weather, InMemoryResponseCache)
        service.close()

    def test_zone_clock_is_aware(self):
        now = zone_clock("Asia/Kolkata")()
        self.assertEqual(now.utcoffset(), dt.timedelta(hours=5, minutes=30))


if __name__ == "__main__":
    unittest.main()
