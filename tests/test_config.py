import importlib
import os
import unittest
from unittest import mock

from bin_collector.core import config


def _reload_with(env: dict):
    with mock.patch.dict(os.environ, {k: v for k, v in env.items() if v is not None}):
        for key in [k for k, v in env.items() if v is None]:
            os.environ.pop(key, None)
        return importlib.reload(config)


class TestConfig(unittest.TestCase):
    def tearDown(self):
        importlib.reload(config)

    def test_address_defaults_when_unset(self):
        cfg = _reload_with({"ADDRESS": None})
        self.assertEqual(cfg.ADDRESS, "začret 69")

    def test_empty_address_falls_back(self):
        cfg = _reload_with({"ADDRESS": "   "})
        self.assertEqual(cfg.ADDRESS, cfg.DEFAULT_ADDRESS)

    def test_address_override(self):
        cfg = _reload_with({"ADDRESS": "Mariborska cesta 7"})
        self.assertEqual(cfg.ADDRESS, "Mariborska cesta 7")

    def test_refresh_policy_overrides(self):
        cfg = _reload_with({"REFRESH_INTERVAL_S": "60", "RETRY_COUNT": "5", "PORT": "9000"})
        self.assertEqual(cfg.REFRESH_INTERVAL_S, 60.0)
        self.assertEqual(cfg.RETRY_COUNT, 5)
        self.assertEqual(cfg.PORT, 9000)

    def test_categories_have_fixed_labels(self):
        self.assertEqual(
            [label for _, label in config.CATEGORIES.values()],
            ["Mešani komunalni odpadki", "Embalaža", "Biološki odpadki"],
        )


if __name__ == "__main__":
    unittest.main()
