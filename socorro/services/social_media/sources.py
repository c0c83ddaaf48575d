"""Fontes de postagens em redes sociais (Twitter/X, Bluesky e simulada)."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence

import httpx

from socorro.domain.entities import Coordinates, SocialMediaPost, utcnow
from socorro.domain.ports import SocialMediaSource
from socorro.infrastructure.retry import retry_with_backoff
from socorro.logging_config import log_external_call

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 15.0
MAX_RESULTS = 50


class _HttpSource(SocialMediaSource):
    label = "HTTP"

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = _DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client: httpx.Client = client or httpx.Client(timeout=timeout)
        self._owns_client: bool = client is None
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def search(
        self, keywords: Sequence[str], location: Optional[Coordinates] = None
    ) -> list[SocialMediaPost]:
        started = time.perf_counter()
        try:
            posts = retry_with_backoff(
                lambda: self._search_once(keywords, location),
                self._max_attempts,
                self._base_delay,
                sleep=self._sleep,
            )
        except Exception as exc:
            elapsed = int((time.perf_counter() - started) * 1000)
            log_external_call(self.label, "fetchReports", False, elapsed, error=str(exc))
            raise
        elapsed = int((time.perf_counter() - started) * 1000)
        log_external_call(
            self.label, "fetchReports", True, elapsed, reports_found=len(posts), keywords=list(keywords)
        )
        return posts

    def _search_once(
        self, keywords: Sequence[str], location: Optional[Coordinates]
    ) -> list[SocialMediaPost]:
        raise NotImplementedError


class TwitterSource(_HttpSource):
    """Busca recente da API v2 do Twitter/X autenticada por *bearer token*."""

    name = "twitter"
    label = "Twitter"
    endpoint = "https://api.twitter.com/2/tweets/search/recent"

    def __init__(self, bearer_token: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._bearer_token = bearer_token

    @staticmethod
    def build_query(keywords: Sequence[str], location: Optional[Coordinates] = None) -> str:
        query = (
            " OR ".join(f"#{keyword}" for keyword in keywords)
            if keywords
            else "#disaster OR #emergency"
        )
        if location is not None:
            query += f" geocode:{location.lat},{location.lng},10km"
        return query

    def _search_once(
        self, keywords: Sequence[str], location: Optional[Coordinates]
    ) -> list[SocialMediaPost]:
        response = self._client.get(
            self.endpoint,
            params={
                "query": self.build_query(keywords, location),
                "max_results": MAX_RESULTS,
                "tweet.fields": "created_at,author_id,public_metrics,context_annotations,geo",
                "user.fields": "username,name,verified",
                "expansions": "author_id",
            },
            headers={"Authorization": f"Bearer {self._bearer_token}"},
        )
        response.raise_for_status()
        payload = response.json()
        if "data" not in payload:
            raise ValueError("No data returned from Twitter API")
        users = (payload.get("includes") or {}).get("users") or []
        return [
            SocialMediaPost(
                id=str(tweet["id"]),
                platform=self.name,
                content=tweet.get("text", ""),
                author=_twitter_author(tweet.get("author_id"), users),
                created_at=_parse_timestamp(tweet.get("created_at")),
                url=f"https://twitter.com/user/status/{tweet['id']}",
                metrics=dict(tweet.get("public_metrics") or {}),
            )
            for tweet in payload["data"]
        ]


class BlueskySource(_HttpSource):
    """Busca de postagens do Bluesky com sessão criada a partir das credenciais."""

    name = "bluesky"
    label = "Bluesky"
    base_url = "https://bsky.social/xrpc"

    def __init__(self, identifier: str, password: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._identifier = identifier
        self._password = password
        self._access_token: Optional[str] = None

    def _session_token(self) -> str:
        if self._access_token is None:
            response = self._client.post(
                f"{self.base_url}/com.atproto.server.createSession",
                json={"identifier": self._identifier, "password": self._password},
            )
            response.raise_for_status()
            self._access_token = response.json()["accessJwt"]
        return self._access_token

    def _search_once(
        self, keywords: Sequence[str], location: Optional[Coordinates]
    ) -> list[SocialMediaPost]:
        query = " ".join(keywords) if keywords else "disaster emergency"
        response = self._client.get(
            f"{self.base_url}/app.bsky.feed.searchPosts",
            params={"q": query, "limit": MAX_RESULTS},
            headers={"Authorization": f"Bearer {self._session_token()}"},
        )
        if response.status_code == 401:
            self._access_token = None
        response.raise_for_status()
        payload = response.json()
        if "posts" not in payload:
            raise ValueError("No data returned from Bluesky API")
        posts = []
        for post in payload["posts"]:
            author = post.get("author") or {}
            record = post.get("record") or {}
            handle = author.get("handle", "")
            uri = str(post.get("uri", ""))
            posts.append(
                SocialMediaPost(
                    id=uri,
                    platform=self.name,
                    content=record.get("text", ""),
                    author=author.get("displayName") or handle,
                    created_at=_parse_timestamp(record.get("createdAt")),
                    url=f"https://bsky.app/profile/{handle}/post/{uri.rsplit('/', 1)[-1]}",
                    metrics={
                        "replyCount": post.get("replyCount", 0),
                        "repostCount": post.get("repostCount", 0),
                        "likeCount": post.get("likeCount", 0),
                    },
                )
            )
        return posts


# (id, conteúdo, autor, minutos atrás, métricas)
_MOCK_POSTS: tuple[tuple[str, str, str, int, Mapping[str, int]], ...] = (
    (
        "mock_1",
        "#floodrelief Need food and water in Lower East Side. Families trapped on 3rd floor. #emergency #NYC",
        "citizen_reporter1",
        30,
        {"replyCount": 5, "retweetCount": 12, "likeCount": 8},
    ),
    (
        "mock_2",
        "Shelter available at Community Center on Main St. Can accommodate 50 people. #disasterrelief #shelter",
        "relief_org_official",
        45,
        {"replyCount": 2, "retweetCount": 25, "likeCount": 15},
    ),
    (
        "mock_3",
        "URGENT: Medical assistance needed at 123 Oak Street. Elderly person trapped. #SOS #medical #emergency",
        "first_responder",
        15,
        {"replyCount": 8, "retweetCount": 35, "likeCount": 20},
    ),
    (
        "mock_4",
        "Power restored to downtown area. Water still not safe to drink. Boil water advisory in effect. #update",
        "city_emergency_mgmt",
        60,
        {"replyCount": 15, "retweetCount": 45, "likeCount": 30},
    ),
    (
        "mock_5",
        "Volunteers needed at Red Cross center. Bring supplies if possible. #volunteer #help #disaster",
        "volunteer_coordinator",
        90,
        {"replyCount": 3, "retweetCount": 18, "likeCount": 12},
    ),
)


class MockSocialMediaSource(SocialMediaSource):
    """Cinco postagens de exemplo filtradas pelas palavras-chave."""

    name = "mock"
    platform = "mock_twitter"

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def search(
        self, keywords: Sequence[str], location: Optional[Coordinates] = None
    ) -> list[SocialMediaPost]:
        now = self._clock()
        posts = [
            SocialMediaPost(
                id=post_id,
                platform=self.platform,
                content=content,
                author=author,
                created_at=now - timedelta(minutes=minutes_ago),
                url=f"https://twitter.com/mock/status/{post_id.rsplit('_', 1)[-1]}",
                metrics=dict(metrics),
            )
            for post_id, content, author, minutes_ago, metrics in _MOCK_POSTS
        ]
        if keywords:
            lowered = [keyword.lower() for keyword in keywords]
            posts = [
                post for post in posts if any(keyword in post.content.lower() for keyword in lowered)
            ]
        log_external_call("Mock Social Media", "fetchReports", True, 0, reports_found=len(posts))
        return posts


def _twitter_author(author_id: Any, users: Iterable[Dict[str, Any]]) -> str:
    for user in users:
        if user.get("id") == author_id:
            return f"{user.get('name')} (@{user.get('username')})"
    return "Unknown User"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            log.debug("data inválida ignorada: %s", value)
    return utcnow()


__all__ = [
    "BlueskySource",
    "MockSocialMediaSource",
    "TwitterSource",
]
