"""Hacker News Firebase API client for hngrep."""

from typing import Protocol

import httpx

from hngrep.models import Story
from hngrep.utils.logging import get_logger

logger = get_logger(__name__)

HACKER_NEWS_API_BASE = "https://hacker-news.firebaseio.com/v0"


class HackerNewsError(Exception):
    """Base class for failures talking to the Hacker News API."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class TopStoriesFetchError(HackerNewsError):
    """Raised when the top story listing cannot be fetched or decoded."""


class StoryFetchError(HackerNewsError):
    """Raised when a single item cannot be fetched or decoded."""

    def __init__(self, story_id: int, reason: str) -> None:
        self.story_id = story_id
        super().__init__(reason)


class HackerNewsAPI(Protocol):
    """The two calls the pipeline needs from a story source."""

    async def get_top_stories(self) -> list[int]: ...

    async def get_story(self, story_id: int) -> Story | None: ...


class HackerNewsClient:
    """Client for the public Hacker News API."""

    def __init__(self, base_url: str = HACKER_NEWS_API_BASE, timeout: float = 10.0) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "HackerNewsClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def get_top_stories(self) -> list[int]:
        """Get the ranked list of top story IDs.

        Returns:
            Story IDs in the API's ranking order.

        Raises:
            TopStoriesFetchError: If the request fails or the payload is not
                a JSON array of integers.
        """
        logger.info("Fetching top stories")
        try:
            data = await self._get_json("/topstories.json")
        except HackerNewsError as e:
            raise TopStoriesFetchError(e.reason) from e

        if not isinstance(data, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in data
        ):
            raise TopStoriesFetchError("unexpected payload: expected a list of story IDs")

        logger.debug("Top stories received", count=len(data))
        return data

    async def get_story(self, story_id: int) -> Story | None:
        """Get a single story by ID.

        Args:
            story_id: The Hacker News item ID.

        Returns:
            The Story, or None when the API has no item with this ID.

        Raises:
            StoryFetchError: If the request fails or the payload is malformed.
        """
        logger.debug("Fetching story", story_id=story_id)
        try:
            data = await self._get_json(f"/item/{story_id}.json")
        except HackerNewsError as e:
            raise StoryFetchError(story_id, e.reason) from e

        if data is None:
            return None
        if not isinstance(data, dict):
            raise StoryFetchError(story_id, "unexpected payload: expected an item object")

        try:
            return Story.from_api_response({"id": story_id, **data})
        except (TypeError, ValueError) as e:
            raise StoryFetchError(story_id, f"invalid item: {e}") from e

    async def _get_json(self, path: str) -> object:
        """GET a path and decode its JSON body.

        Raises:
            HackerNewsError: If the HTTP request fails or the body is not JSON.
        """
        try:
            response = await self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("HTTP error fetching URL", path=path, status=e.response.status_code)
            raise HackerNewsError(f"HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            logger.warning("Timeout fetching URL", path=path)
            raise HackerNewsError("timeout") from e
        except httpx.RequestError as e:
            logger.warning("Request error fetching URL", path=path, error=str(e))
            raise HackerNewsError(f"request error: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise HackerNewsError(f"invalid JSON: {e}") from e
