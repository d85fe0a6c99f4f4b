import unittest

from citydash.city import city_hash, hash_bucket, normalize_city
from citydash.errors import MissingParameter


class TestNormalizeCity(unittest.TestCase):
    def test_trims_and_lowercases(self):
        self.assertEqual(normalize_city("  Delhi "), "delhi")
        self.assertEqual(normalize_city("MUMBAI"), "mumbai")

    def test_lowercase_keeps_non_ascii_letters(self):
        self.assertEqual(normalize_city("Straße"), "straße")
        self.assertEqual(normalize_city("ÉVORA"), "évora")

    def test_drops_periods_and_collapses_whitespace(self):
        self.assertEqual(normalize_city(" St.  Louis "), "st louis")
        self.assertEqual(normalize_city("st louis"), "st louis")
        self.assertEqual(normalize_city("New\tYork"), "new york")

    def test_missing_or_blank_raises(self):
        for raw in (None, "", "   ", "..", " . "):
            with self.subTest(raw=raw):
                with self.assertRaises(MissingParameter) as ctx:
                    normalize_city(raw)
                self.assertEqual(ctx.exception.parameter, "city")
                self.assertEqual(ctx.exception.message, "City is required")


class TestCityHash(unittest.TestCase):
    def test_known_fnv1a_vectors(self):
        self.assertEqual(city_hash(""), 2166136261)
        self.assertEqual(city_hash("a"), 0xE40C292C)
        self.assertEqual(city_hash("foobar"), 0xBF9CF968)

    def test_stable_and_32_bit(self):
        h = city_hash("são paulo")
        self.assertEqual(h, city_hash("são paulo"))
        self.assertGreaterEqual(h, 0)
        self.assertLess(h, 2**32)
        self.assertNotEqual(city_hash("pune"), city_hash("puna"))

    def test_hash_bucket_range(self):
        h = city_hash("springfield")
        for modulo, shift in ((10, 0), (60, 3), (1200, 9)):
            value = hash_bucket(h, modulo, shift=shift)
            self.assertGreaterEqual(value, 0)
            self.assertLess(value, modulo)
        self.assertEqual(hash_bucket(0b1100, 4, shift=2), 3)


if __name__ == "__main__":
    unittest.main()
