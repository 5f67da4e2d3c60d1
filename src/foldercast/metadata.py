"""Channel and episode metadata as persisted in ``metadata.json`` sidecars.

Channel sidecar format::

    {
        "title": "My Show",
        "description": "My Show",
        "site_url": "https://example.com",
        "categories": ["Education"],
        "explicit": false,
        "guid": "5f0c...",
        "date": "2024-01-01T00:00:00.000Z",
        "hideDate": false,
        "itemMetadata": {
            "01 Intro.mp3": {
                "title": "01 Intro",
                "description": "Episode 1",
                "guid": "9a1e...",
                "date": "2023-12-31T23:59:50.000Z",
                "duration": 1834000,
                "hideDate": false
            }
        }
    }

``date`` is the reference instant synthetic episode dates are derived from.
Keys that this version does not know about are carried through unchanged.

Root sidecar format (``<root>/metadata.json``)::

    {
        "coverUrl": "https://example.com/cover.jpg",
        "websiteUrl": "https://example.com",
        "categories": ["Religion & Spirituality", "Education"],
        "priorities": ["Kids", "Talks"]
    }
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from .dates import now_instant
from .utils import parse_bool

DEFAULT_COVER_URL = "https://example.com/cover.jpg"
DEFAULT_CATEGORIES = ("Religion & Spirituality", "Education")

_CHANNEL_KEYS = {
    "title",
    "description",
    "site_url",
    "categories",
    "explicit",
    "guid",
    "date",
    "hideDate",
    "itemMetadata",
}


def new_guid() -> str:
    return str(uuid.uuid4())


@dataclass
class EpisodeMetadata:
    title: str
    guid: str
    date: str
    description: str
    duration: int = 0  # milliseconds
    hide_date: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "guid": self.guid,
            "date": self.date,
            "duration": self.duration,
            "hideDate": self.hide_date,
        }


@dataclass
class ChannelMetadata:
    title: str
    description: str
    site_url: str
    categories: list[str] = field(default_factory=list)
    explicit: bool = False
    guid: str = field(default_factory=new_guid)
    date: str = field(default_factory=now_instant)
    hide_date: bool = False
    items: dict[str, dict[str, Any]] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChannelMetadata":
        items = data.get("itemMetadata")
        categories = data.get("categories")
        return cls(
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            site_url=str(data.get("site_url") or ""),
            categories=[str(c) for c in categories]
            if isinstance(categories, list)
            else [],
            explicit=bool(parse_bool(data.get("explicit"))),
            guid=str(data.get("guid") or new_guid()),
            date=str(data.get("date") or now_instant()),
            hide_date=bool(parse_bool(data.get("hideDate"))),
            items={
                str(name): entry
                for name, entry in (items or {}).items()
                if isinstance(entry, dict)
            }
            if isinstance(items, dict)
            else {},
            extra={k: v for k, v in data.items() if k not in _CHANNEL_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "title": self.title,
                "description": self.description,
                "site_url": self.site_url,
                "categories": list(self.categories),
                "explicit": self.explicit,
                "guid": self.guid,
                "date": self.date,
                "hideDate": self.hide_date,
                "itemMetadata": self.items,
            }
        )
        return payload


@dataclass(frozen=True)
class RootDefaults:
    cover_url: str = DEFAULT_COVER_URL
    website_url: str = ""
    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    priorities: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RootDefaults":
        return cls(
            cover_url=str(data.get("coverUrl") or DEFAULT_COVER_URL),
            website_url=str(data.get("websiteUrl") or ""),
            categories=tuple(str(c) for c in data.get("categories") or ()),
            priorities=tuple(str(p) for p in data.get("priorities") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "coverUrl": self.cover_url,
            "websiteUrl": self.website_url,
            "categories": list(self.categories),
            "priorities": list(self.priorities),
        }
