"""Fontes de comunicados oficiais: páginas raspadas, feeds RSS e simulação."""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Iterable, Optional, Sequence
from urllib.parse import urljoin, urlsplit

import feedparser
import requests
from bs4 import BeautifulSoup

from socorro.domain.entities import OfficialUpdate, utcnow
from socorro.domain.ports import UpdateSource
from socorro.infrastructure.retry import retry_with_backoff
from socorro.logging_config import log_external_call

log = logging.getLogger(__name__)

MAX_UPDATES_PER_SOURCE = 10
_SCRAPE_TIMEOUT = 15
_RSS_TIMEOUT = 10

_DEFAULT_HEADERS = {
    "User-Agent": "DisasterResponsePlatform/1.0 (Emergency Management System)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

_RELATIVE_DATE_RE = re.compile(r"(\d+)\s+(minute|hour|day)s?\s+ago", re.IGNORECASE)
_COLLAPSE_WHITESPACE_RE = re.compile(r"\s+", re.UNICODE)
_ITEM_CONTAINER_CLASSES = ("news-item", "alert-item")
_TEXT_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%m/%d/%Y", "%Y-%m-%d")


def matches_keywords(update: OfficialUpdate, keywords: Sequence[str]) -> bool:
    """Filtro OU: alguma palavra aparece no título ou no conteúdo."""

    if not keywords:
        return True
    text = f"{update.title} {update.content}".lower()
    return any(keyword.lower() in text for keyword in keywords)


def parse_published(value: Optional[str], now: datetime) -> datetime:
    """Interpreta datas absolutas ou relativas ("2 hours ago").

    Valores ausentes ou não reconhecidos resultam em ``now``.
    """

    if not value:
        return now
    text = _COLLAPSE_WHITESPACE_RE.sub(" ", value.replace("\xa0", " ")).strip()

    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        parsed = None
    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            parsed = None
    if parsed is None:
        for date_format in _TEXT_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, date_format)
                break
            except ValueError:
                continue
    if parsed is not None:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    match = _RELATIVE_DATE_RE.search(text)
    if match:
        amount = int(match.group(1))
        unit = match.group(2).lower()
        return now - timedelta(**{f"{unit}s": amount})
    return now


@dataclass(frozen=True)
class ScrapeTarget:
    """Página de uma fonte oficial e os seletores CSS de seus itens."""

    name: str
    url: str
    title: str
    content: str
    date: str
    link: str


DEFAULT_SCRAPE_TARGETS: tuple[ScrapeTarget, ...] = (
    ScrapeTarget(
        name="FEMA",
        url="https://www.fema.gov/disaster/current",
        title=".field--name-title a",
        content=".field--name-body p",
        date=".field--name-created time",
        link=".field--name-title a",
    ),
    ScrapeTarget(
        name="Red Cross",
        url="https://www.redcross.org/about-us/news-and-events",
        title=".news-item h3 a",
        content=".news-item .excerpt",
        date=".news-item .date",
        link=".news-item h3 a",
    ),
    ScrapeTarget(
        name="National Weather Service",
        url="https://www.weather.gov/alerts",
        title=".alert-title",
        content=".alert-description",
        date=".alert-date",
        link=".alert-title a",
    ),
)


class _SessionSource(UpdateSource):
    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep
        self._clock = clock

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def _get(self, url: str, timeout: float) -> requests.Response:
        def call() -> requests.Response:
            response = self._session.get(url, headers=dict(_DEFAULT_HEADERS), timeout=timeout)
            response.raise_for_status()
            return response

        return retry_with_backoff(call, self._max_attempts, self._base_delay, sleep=self._sleep)


class ScrapedUpdateSource(_SessionSource):
    """Raspa a listagem de uma fonte oficial com requests e BeautifulSoup."""

    def __init__(self, target: ScrapeTarget, **kwargs) -> None:
        super().__init__(**kwargs)
        self._target = target
        self.name = target.name

    @property
    def url(self) -> str:
        return self._target.url

    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        started = time.perf_counter()
        try:
            response = self._get(self._target.url, _SCRAPE_TIMEOUT)
            updates = self.parse(response.text, keywords)
        except Exception as exc:
            log_external_call(self.name, "fetchUpdates", False, _elapsed(started), error=str(exc))
            raise
        log_external_call(
            self.name, "fetchUpdates", True, _elapsed(started), updates_found=len(updates)
        )
        return updates

    def parse(self, html: str, keywords: Sequence[str] = ()) -> list[OfficialUpdate]:
        """Extrai até dez comunicados do HTML da listagem."""

        target = self._target
        soup = BeautifulSoup(html, "html.parser")
        now = self._clock()
        updates: list[OfficialUpdate] = []
        for index, element in enumerate(soup.select(target.title)[:MAX_UPDATES_PER_SOURCE]):
            title = element.get_text(strip=True)
            link_element = element if element.name == "a" else element.select_one("a")
            href = link_element.get("href") if link_element is not None else None
            container = _item_container(element)
            content_element = container.select_one(target.content) if container else None
            date_element = container.select_one(target.date) if container else None
            content = content_element.get_text(strip=True) if content_element else ""
            date_text = None
            if date_element is not None:
                date_text = date_element.get_text(strip=True) or date_element.get("datetime")
            update = OfficialUpdate(
                id=f"{target.name.lower().replace(' ', '_')}_{index}",
                source=target.name,
                title=title,
                content=content or title,
                url=urljoin(target.url, href) if href else target.url,
                published_at=parse_published(date_text, now),
                fetched_at=now,
            )
            if matches_keywords(update, keywords):
                updates.append(update)
        return updates


class RssUpdateSource(_SessionSource):
    """Lê comunicados de um feed RSS/Atom com ``feedparser``."""

    def __init__(self, feed_url: str, name: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._feed_url = feed_url
        self.name = name or urlsplit(feed_url).netloc or feed_url

    @property
    def url(self) -> str:
        return self._feed_url

    @classmethod
    def from_setting(cls, entry: str, **kwargs) -> "RssUpdateSource":
        """Aceita ``url`` ou ``Nome|url`` (formato de OFFICIAL_UPDATES_RSS_FEEDS)."""

        name, sep, url = entry.partition("|")
        if not sep:
            return cls(entry.strip(), **kwargs)
        return cls(url.strip(), name=name.strip() or None, **kwargs)

    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        started = time.perf_counter()
        try:
            response = self._get(self._feed_url, _RSS_TIMEOUT)
            updates = self.parse(response.content, keywords)
        except Exception as exc:
            log_external_call(self.name, "fetchRss", False, _elapsed(started), error=str(exc))
            raise
        log_external_call(self.name, "fetchRss", True, _elapsed(started), updates_found=len(updates))
        return updates

    def parse(self, document: bytes | str, keywords: Sequence[str] = ()) -> list[OfficialUpdate]:
        feed = feedparser.parse(document)
        if feed.bozo and not feed.entries:
            raise ValueError(f"Feed parse error: {feed.bozo_exception}")
        now = self._clock()
        slug = self.name.lower().replace(" ", "_")
        updates: list[OfficialUpdate] = []
        for index, entry in enumerate(feed.entries[:MAX_UPDATES_PER_SOURCE]):
            parsed_time = entry.get("published_parsed") or entry.get("updated_parsed")
            published_at = (
                datetime(*parsed_time[:6], tzinfo=timezone.utc) if parsed_time else now
            )
            summary = entry.get("summary", "")
            content = BeautifulSoup(summary, "html.parser").get_text(" ", strip=True)
            title = entry.get("title", "Untitled")
            update = OfficialUpdate(
                id=f"{slug}_rss_{index}",
                source=self.name,
                title=title,
                content=content or title,
                url=entry.get("link") or self._feed_url,
                published_at=published_at,
                fetched_at=now,
            )
            if matches_keywords(update, keywords):
                updates.append(update)
        return updates


# (id, fonte, título, conteúdo, url, horas atrás)
_MOCK_UPDATES: tuple[tuple[str, str, str, str, str, int], ...] = (
    (
        "fema_mock_1",
        "FEMA",
        "Federal Disaster Declaration Approved for Flood-Affected Areas",
        "FEMA has approved federal disaster assistance for individuals and communities "
        "affected by recent flooding. Residents can now apply for temporary housing "
        "assistance, home repairs, and other disaster-related expenses.",
        "https://www.fema.gov/disaster/mock-declaration-1",
        2,
    ),
    (
        "redcross_mock_1",
        "Red Cross",
        "Emergency Shelters Open in Affected Communities",
        "The American Red Cross has opened emergency shelters in three locations to "
        "provide safe housing for displaced families. Shelters are equipped with food, "
        "water, and basic necessities.",
        "https://www.redcross.org/mock-shelter-update-1",
        4,
    ),
    (
        "nws_mock_1",
        "National Weather Service",
        "Flash Flood Warning Extended Through Tomorrow",
        "The National Weather Service has extended the flash flood warning for the "
        "metropolitan area through tomorrow evening. Residents are advised to avoid travel "
        "in low-lying areas and never drive through flooded roads.",
        "https://www.weather.gov/mock-flood-warning-1",
        6,
    ),
    (
        "local_emergency_mock_1",
        "Local Emergency Management",
        "Water Distribution Points Established",
        "Local emergency management has established water distribution points at three "
        "locations throughout the city. Each family can receive up to 5 gallons of "
        "drinking water per day.",
        "https://local-emergency.gov/mock-water-distribution",
        8,
    ),
    (
        "utility_company_mock_1",
        "Utility Company",
        "Power Restoration Update - 75% of Customers Restored",
        "Power has been restored to 75% of affected customers. Crews are working around "
        "the clock to restore service to remaining areas. Full restoration expected "
        "within 48 hours.",
        "https://utility-company.com/mock-power-update",
        10,
    ),
)


class MockUpdateSource(UpdateSource):
    """Cinco comunicados de exemplo filtrados pelas palavras-chave."""

    name = "mock"
    url = None

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        now = self._clock()
        updates = [
            OfficialUpdate(
                id=update_id,
                source=source,
                title=title,
                content=content,
                url=url,
                published_at=now - timedelta(hours=hours_ago),
                fetched_at=now,
            )
            for update_id, source, title, content, url, hours_ago in _MOCK_UPDATES
        ]
        updates = [update for update in updates if matches_keywords(update, keywords)]
        log_external_call(
            "Mock Official Updates", "fetchUpdates", True, 0, updates_found=len(updates)
        )
        return updates


def build_scraped_sources(
    targets: Iterable[ScrapeTarget] = DEFAULT_SCRAPE_TARGETS, **kwargs
) -> list[ScrapedUpdateSource]:
    return [ScrapedUpdateSource(target, **kwargs) for target in targets]


def _item_container(element):
    for parent in element.parents:
        if parent.name == "article":
            return parent
        classes = parent.get("class") or ()
        if any(name in classes for name in _ITEM_CONTAINER_CLASSES):
            return parent
    return None


def _elapsed(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = [
    "DEFAULT_SCRAPE_TARGETS",
    "MAX_UPDATES_PER_SOURCE",
    "MockUpdateSource",
    "RssUpdateSource",
    "ScrapeTarget",
    "ScrapedUpdateSource",
    "build_scraped_sources",
    "matches_keywords",
    "parse_published",
]
