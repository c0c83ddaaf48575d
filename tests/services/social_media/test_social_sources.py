from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from socorro.domain.entities import Coordinates
from socorro.services.social_media import BlueskySource, MockSocialMediaSource, TwitterSource

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _no_sleep(_: float) -> None:
    return None


def test_twitter_query_uses_hashtags_and_geocode() -> None:
    query = TwitterSource.build_query(["flood", "nyc"], Coordinates(lat=40.7, lng=-74.0))

    assert query == "#flood OR #nyc geocode:40.7,-74.0,10km"
    assert TwitterSource.build_query([]) == "#disaster OR #emergency"


def test_twitter_search_maps_tweets_and_authors() -> None:
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "123",
                        "text": "SOS trapped in Brooklyn",
                        "author_id": "u1",
                        "created_at": "2024-06-01T10:00:00.000Z",
                        "public_metrics": {"like_count": 4},
                    }
                ],
                "includes": {"users": [{"id": "u1", "name": "Ana", "username": "ana"}]},
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    source = TwitterSource("secret", client=client, max_attempts=1, sleep=_no_sleep)

    posts = source.search(["flood"])

    assert seen["request"].headers["Authorization"] == "Bearer secret"
    assert seen["request"].url.params["query"] == "#flood"
    assert len(posts) == 1
    assert posts[0].author == "Ana (@ana)"
    assert posts[0].url == "https://twitter.com/user/status/123"
    assert posts[0].created_at == datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert posts[0].metrics == {"like_count": 4}


def test_twitter_payload_without_data_is_an_error() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    source = TwitterSource("secret", client=client, max_attempts=2, sleep=_no_sleep)

    with pytest.raises(ValueError):
        source.search(["flood"])


def test_bluesky_creates_session_once_and_maps_posts() -> None:
    sessions: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("createSession"):
            sessions.append(request)
            return httpx.Response(200, json={"accessJwt": "jwt-token"})
        assert request.headers["Authorization"] == "Bearer jwt-token"
        return httpx.Response(
            200,
            json={
                "posts": [
                    {
                        "uri": "at://did:plc:abc/app.bsky.feed.post/xyz",
                        "author": {"handle": "ana.bsky.social", "displayName": "Ana"},
                        "record": {"text": "Need water", "createdAt": "2024-06-01T09:00:00Z"},
                        "likeCount": 3,
                    }
                ]
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    source = BlueskySource("ana.bsky.social", "app-password", client=client, max_attempts=1)

    source.search(["flood"])
    posts = source.search(["flood"])

    assert len(sessions) == 1
    assert posts[0].author == "Ana"
    assert posts[0].url == "https://bsky.app/profile/ana.bsky.social/post/xyz"
    assert posts[0].metrics["likeCount"] == 3


def test_mock_source_filters_posts_by_keyword() -> None:
    source = MockSocialMediaSource(clock=lambda: NOW)

    assert [post.id for post in source.search(["flood"])] == ["mock_1"]
    assert [post.id for post in source.search(["EMERGENCY"])] == ["mock_1", "mock_3"]
    assert len(source.search([])) == 5
    assert all(post.created_at < NOW for post in source.search([]))
