import tempfile
import unittest
from pathlib import Path

from foldercast.config import ConfigError, build_config


class TestBuildConfig(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.ini_path = Path(self._temp_dir.name) / "config.ini"

    def test_environment_values(self) -> None:
        config = build_config(
            environ={"MAIN_DIRECTORY": "/srv/podcasts", "ROOT_SHARE_URL": "https://host/s"},
            user_config_path=self.ini_path,
        )

        self.assertEqual(config.root_dir, Path("/srv/podcasts"))
        self.assertEqual(config.share_url, "https://host/s")
        self.assertEqual(config.site_url, "https://example.com")
        self.assertEqual(config.interval_hours, 4.0)
        self.assertTrue(config.encode_urls)
        self.assertEqual(config.url_list_path, Path("/srv/podcasts/feed_urls.txt"))

    def test_precedence_ini_env_cli(self) -> None:
        self.ini_path.write_text(
            "[foldercast]\n"
            "root_dir = /from/ini\n"
            "share_url = https://ini/s\n"
            "site_url = https://ini.example.com\n"
            "interval_hours = 2\n"
            "normalize_names = yes\n",
            encoding="utf-8",
        )

        config = build_config(
            overrides={"root_dir": "/from/cli", "site_url": None},
            environ={"ROOT_SHARE_URL": "https://env/s"},
            user_config_path=self.ini_path,
        )

        self.assertEqual(config.root_dir, Path("/from/cli"))
        self.assertEqual(config.share_url, "https://env/s")
        self.assertEqual(config.site_url, "https://ini.example.com")
        self.assertEqual(config.interval_hours, 2.0)
        self.assertTrue(config.normalize_names)

    def test_false_words_in_ini(self) -> None:
        self.ini_path.write_text(
            "[foldercast]\nroot_dir = /r\nshare_url = https://s\nencode_urls = false\n",
            encoding="utf-8",
        )

        config = build_config(environ={}, user_config_path=self.ini_path)

        self.assertFalse(config.encode_urls)

    def test_missing_root_is_an_error(self) -> None:
        with self.assertRaises(ConfigError):
            build_config(
                environ={"ROOT_SHARE_URL": "https://host/s"}, user_config_path=self.ini_path
            )

    def test_missing_share_url_is_an_error(self) -> None:
        with self.assertRaises(ConfigError):
            build_config(
                environ={"MAIN_DIRECTORY": "/srv/podcasts"}, user_config_path=self.ini_path
            )

    def test_invalid_interval_is_an_error(self) -> None:
        environ = {"MAIN_DIRECTORY": "/r", "ROOT_SHARE_URL": "https://s"}
        for value in ("soon", "0", "-1"):
            with self.subTest(value=value), self.assertRaises(ConfigError):
                build_config(
                    environ={**environ, "FOLDERCAST_INTERVAL_HOURS": value},
                    user_config_path=self.ini_path,
                )


if __name__ == "__main__":
    unittest.main()
