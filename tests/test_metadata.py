import unittest

from foldercast.metadata import ChannelMetadata
from foldercast.utils import parse_bool


class TestChannelMetadata(unittest.TestCase):
    def test_hand_edited_flags_are_parsed(self) -> None:
        channel = ChannelMetadata.from_dict(
            {"title": "Show", "explicit": "false", "hideDate": "yes"}
        )

        self.assertFalse(channel.explicit)
        self.assertTrue(channel.hide_date)

    def test_unreadable_flag_falls_back_to_false(self) -> None:
        channel = ChannelMetadata.from_dict({"title": "Show", "explicit": "sometimes"})

        self.assertFalse(channel.explicit)

    def test_unknown_keys_are_carried_through(self) -> None:
        data = {
            "title": "Show",
            "guid": "g",
            "date": "2024-01-01T00:00:00.000Z",
            "owner": "me",
        }

        payload = ChannelMetadata.from_dict(data).to_dict()

        self.assertEqual(payload["owner"], "me")
        self.assertEqual(payload["guid"], "g")
        self.assertEqual(payload["itemMetadata"], {})


class TestParseBool(unittest.TestCase):
    def test_words(self) -> None:
        for value, expected in (
            (True, True),
            ("No", False),
            (" on ", True),
            ("0", False),
            (1, True),
            (None, None),
            ("maybe", None),
        ):
            with self.subTest(value=value):
                self.assertIs(parse_bool(value), expected)


if __name__ == "__main__":
    unittest.main()
