"""Comunicados de fontes oficiais (FEMA, Cruz Vermelha, NWS e feeds RSS)."""

from .service import OfficialUpdatesFeed, OfficialUpdatesService, keywords_for
from .sources import (
    DEFAULT_SCRAPE_TARGETS,
    MockUpdateSource,
    RssUpdateSource,
    ScrapedUpdateSource,
    ScrapeTarget,
    build_scraped_sources,
)

__all__ = [
    "DEFAULT_SCRAPE_TARGETS",
    "MockUpdateSource",
    "OfficialUpdatesFeed",
    "OfficialUpdatesService",
    "RssUpdateSource",
    "ScrapeTarget",
    "ScrapedUpdateSource",
    "build_scraped_sources",
    "keywords_for",
]
