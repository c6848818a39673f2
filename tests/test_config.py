import unittest
from pathlib import Path

from scolarite.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings, default_token_path


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = Settings.from_env({})
        self.assertEqual(s.api_url, DEFAULT_API_URL)
        self.assertIsNone(s.api_key)
        self.assertEqual(s.timeout, DEFAULT_TIMEOUT)
        self.assertEqual(s.token_file, default_token_path())

    def test_from_environment(self) -> None:
        s = Settings.from_env(
            {
                "SCOLARITE_API_URL": "https://scolarite.example.org/",
                "SCOLARITE_API_KEY": " key ",
                "SCOLARITE_TIMEOUT": "7.5",
                "SCOLARITE_TOKEN_FILE": "/tmp/token.json",
            }
        )
        self.assertEqual(s.api_url, "https://scolarite.example.org")
        self.assertEqual(s.api_key, "key")
        self.assertEqual(s.timeout, 7.5)
        self.assertEqual(s.token_file, Path("/tmp/token.json"))

    def test_invalid_timeout_falls_back(self) -> None:
        self.assertEqual(Settings.from_env({"SCOLARITE_TIMEOUT": "soon"}).timeout, DEFAULT_TIMEOUT)
        self.assertEqual(Settings.from_env({"SCOLARITE_TIMEOUT": "-1"}).timeout, DEFAULT_TIMEOUT)


if __name__ == "__main__":
    unittest.main()
