"""Podcast RSS rendering with feedgen."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from feedgen.ext.base import BaseExtension
from feedgen.feed import FeedGenerator
from lxml import etree

from .audio import content_type
from .dates import parse_instant
from .metadata import ChannelMetadata
from .reconciler import Episode

PODCAST_INDEX_NS = "https://podcastindex.org/namespace/1.0"
FEED_LANGUAGE = "en"


class PodcastIndexExtension(BaseExtension):
    """Channel-level ``podcast:guid`` from the podcast-index namespace."""

    def __init__(self) -> None:
        self.__guid: str | None = None

    def extend_ns(self) -> dict[str, str]:
        return {"podcast": PODCAST_INDEX_NS}

    def extend_rss(self, rss_feed):  # type: ignore[no-untyped-def]
        if self.__guid:
            channel = rss_feed[0]
            guid = etree.SubElement(channel, "{%s}guid" % PODCAST_INDEX_NS)
            guid.text = self.__guid
        return rss_feed

    def guid(self, guid: str | None = None) -> str | None:
        if guid is not None:
            self.__guid = guid
        return self.__guid


def build_feed(
    channel: ChannelMetadata,
    episodes: Iterable[Episode],
    *,
    feed_url: str,
    cover_url: str,
    item_url: Callable[[str], str],
    logger: logging.Logger | None = None,
) -> str:
    """Render the channel and its episodes as pretty-printed RSS XML."""
    explicit = "yes" if channel.explicit else "no"
    # iTunes only accepts .jpg and .png artwork.
    itunes_image = cover_url if cover_url.endswith((".jpg", ".png")) else None

    fg = FeedGenerator()
    # Extensions must be loaded before entries are added.
    fg.load_extension("podcast")
    fg.register_extension("podcast_index", PodcastIndexExtension, None)

    fg.title(channel.title)
    # RSS <link> takes the href of the last link added, so the site link goes last.
    fg.link(href=feed_url, rel="self")
    fg.link(href=channel.site_url, rel="alternate")
    fg.description(channel.description or channel.title)
    fg.language(FEED_LANGUAGE)
    fg.image(url=cover_url)
    if channel.categories:
        fg.category([{"term": category} for category in channel.categories])
        fg.podcast.itunes_category([{"cat": category} for category in channel.categories])
    fg.podcast.itunes_explicit(explicit)
    if itunes_image:
        fg.podcast.itunes_image(itunes_image)
    fg.podcast_index.guid(channel.guid)

    for episode in episodes:
        meta = episode.metadata
        url = item_url(episode.filename)
        entry = fg.add_entry()
        entry.title(meta.title)
        entry.guid(meta.guid)
        entry.description(meta.description)
        entry.link(href=url)
        entry.enclosure(url, str(episode.size), content_type(episode.filename))
        if not meta.hide_date:
            published = parse_instant(meta.date)
            if published is not None:
                entry.published(published)
            elif logger:
                logger.warning("Episode %s has unparseable date %r", episode.filename, meta.date)
        entry.podcast.itunes_duration(meta.duration // 1000)
        entry.podcast.itunes_explicit(explicit)
        if itunes_image:
            entry.podcast.itunes_image(itunes_image)
        entry.podcast.itunes_order(episode.position)

    return fg.rss_str(pretty=True).decode("utf-8")
