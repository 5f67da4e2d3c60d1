import unittest
import xml.etree.ElementTree as ET

from foldercast.feed import PODCAST_INDEX_NS, build_feed
from foldercast.metadata import ChannelMetadata, EpisodeMetadata
from foldercast.reconciler import Episode

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"


def _channel(**kwargs) -> ChannelMetadata:
    values = {
        "title": "Bedtime Stories",
        "description": "Stories for the evening",
        "site_url": "https://example.com",
        "categories": ["Education", "Kids"],
        "guid": "channel-guid",
        "date": "2024-01-01T00:00:00.000Z",
    }
    values.update(kwargs)
    return ChannelMetadata(**values)


def _episode(filename: str, position: int, **kwargs) -> Episode:
    values = {
        "title": filename.rsplit(".", 1)[0],
        "guid": f"guid-{position}",
        "date": "2023-05-14T00:00:00.000Z",
        "description": f"Episode {position}",
        "duration": 61_500,
    }
    values.update(kwargs)
    return Episode(
        filename=filename, position=position, size=4096, metadata=EpisodeMetadata(**values)
    )


def _render(
    channel: ChannelMetadata,
    episodes: list[Episode],
    cover_url: str = "https://host/s/Show/cover.jpg",
) -> ET.Element:
    xml = build_feed(
        channel,
        episodes,
        feed_url="https://host/s/Show/feed.xml",
        cover_url=cover_url,
        item_url=lambda name: f"https://host/s/Show/items/{name}",
    )
    return ET.fromstring(xml.encode("utf-8"))


def _without_build_date(xml: str) -> list[str]:
    return [line for line in xml.splitlines() if "<lastBuildDate>" not in line]


def _items_by_title(root: ET.Element) -> dict[str, ET.Element]:
    return {item.findtext("title"): item for item in root.iter("item")}


class TestBuildFeed(unittest.TestCase):
    def test_channel_fields(self) -> None:
        root = _render(_channel(), [])
        channel = root.find("channel")

        self.assertEqual(channel.findtext("title"), "Bedtime Stories")
        self.assertEqual(channel.findtext("link"), "https://example.com")
        self.assertEqual(channel.findtext("description"), "Stories for the evening")
        self.assertEqual(channel.findtext(f"{{{PODCAST_INDEX_NS}}}guid"), "channel-guid")
        self.assertEqual(channel.findtext(f"{{{ITUNES_NS}}}explicit"), "no")
        self.assertIsNotNone(channel.find("lastBuildDate"))
        categories = [c.get("text") for c in channel.findall(f"{{{ITUNES_NS}}}category")]
        self.assertEqual(categories, ["Education", "Kids"])
        image = channel.find(f"{{{ITUNES_NS}}}image")
        self.assertEqual(image.get("href"), "https://host/s/Show/cover.jpg")

    def test_item_fields(self) -> None:
        root = _render(_channel(explicit=True), [_episode("01 Intro.mp3", 1)])
        item = _items_by_title(root)["01 Intro"]

        self.assertEqual(item.findtext("guid"), "guid-1")
        self.assertEqual(item.findtext("description"), "Episode 1")
        self.assertIn("14 May 2023", item.findtext("pubDate"))
        enclosure = item.find("enclosure")
        self.assertEqual(enclosure.get("url"), "https://host/s/Show/items/01 Intro.mp3")
        self.assertEqual(enclosure.get("length"), "4096")
        self.assertEqual(enclosure.get("type"), "audio/mpeg")
        self.assertEqual(item.findtext(f"{{{ITUNES_NS}}}duration"), "61")
        self.assertEqual(item.findtext(f"{{{ITUNES_NS}}}explicit"), "yes")
        self.assertEqual(item.findtext(f"{{{ITUNES_NS}}}order"), "1")

    def test_hidden_date_omits_pub_date(self) -> None:
        root = _render(
            _channel(),
            [_episode("01.mp3", 1, hide_date=True), _episode("02.mp3", 2)],
        )
        items = _items_by_title(root)

        self.assertIsNone(items["01"].find("pubDate"))
        self.assertIsNotNone(items["02"].find("pubDate"))
        self.assertEqual(items["01"].findtext(f"{{{ITUNES_NS}}}order"), "1")

    def test_non_itunes_cover_is_not_used_as_itunes_image(self) -> None:
        root = _render(_channel(), [], cover_url="https://host/s/Show/cover.webp")
        channel = root.find("channel")

        self.assertIsNone(channel.find(f"{{{ITUNES_NS}}}image"))
        self.assertEqual(channel.find("image").findtext("url"), "https://host/s/Show/cover.webp")

    def test_rendering_is_stable(self) -> None:
        episodes = [_episode("01.mp3", 1), _episode("02.mp3", 2)]
        kwargs = {
            "feed_url": "https://host/s/Show/feed.xml",
            "cover_url": "https://host/s/Show/cover.jpg",
            "item_url": lambda name: f"https://host/s/Show/items/{name}",
        }

        first = build_feed(_channel(), episodes, **kwargs)
        second = build_feed(_channel(), episodes, **kwargs)

        self.assertEqual(_without_build_date(first), _without_build_date(second))


if __name__ == "__main__":
    unittest.main()
