"""Environment-driven settings."""

from __future__ import annotations

import unittest

from unity_pdb import config


class LogLevelTests(unittest.TestCase):
    def test_known_levels_are_kept(self) -> None:
        for name, expected in (("debug", "DEBUG"), ("INFO", "INFO"), (" error ", "ERROR")):
            with self.subTest(name=name):
                self.assertEqual(config._log_level(name), expected)

    def test_unknown_level_falls_back_to_warning(self) -> None:
        for name in ("verbose", "", "Level 5"):
            with self.subTest(name=name):
                self.assertEqual(config._log_level(name), "WARNING")
