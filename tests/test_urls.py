import unittest

from foldercast.config import ConfigError
from foldercast.urls import resolve_url


class TestResolveUrl(unittest.TestCase):
    def test_segments_are_encoded_independently(self) -> None:
        url = resolve_url(
            "https://cloud.example.com/share", "Kids-Bedtime/items/01 #1 & more.mp3"
        )

        self.assertEqual(
            url,
            "https://cloud.example.com/share/Kids-Bedtime/items/01%20%231%20%26%20more.mp3",
        )

    def test_current_directory_is_dropped(self) -> None:
        self.assertEqual(
            resolve_url("https://cloud.example.com/share/", "./feed_urls.txt"),
            "https://cloud.example.com/share/feed_urls.txt",
        )
        self.assertEqual(
            resolve_url("https://cloud.example.com/share", "feed_urls.txt"),
            "https://cloud.example.com/share/feed_urls.txt",
        )

    def test_encoding_can_be_disabled(self) -> None:
        url = resolve_url("https://host/s", "My Show/feed.xml", encode=False)

        self.assertEqual(url, "https://host/s/My Show/feed.xml")

    def test_reserved_marks_stay_readable(self) -> None:
        url = resolve_url("https://host/s", "Talks/items/Talk (Part 1)!*'.mp3")

        self.assertEqual(url, "https://host/s/Talks/items/Talk%20(Part%201)!*'.mp3")

    def test_missing_base_raises_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            resolve_url("", "Show/feed.xml")


if __name__ == "__main__":
    unittest.main()
