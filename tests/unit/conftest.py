"""Shared fixtures for hngrep unit tests."""

from collections.abc import Iterator
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from hngrep.clients.hackernews import StoryFetchError, TopStoriesFetchError
from hngrep.config import Settings
from hngrep.models import Story


class FakeHackerNewsClient:
    """In-memory story source with the same calls as HackerNewsClient."""

    def __init__(
        self,
        top_stories: list[int],
        stories: dict[int, Story | None] | None = None,
        failing: dict[int, str] | None = None,
        top_error: str | None = None,
    ) -> None:
        self.top_stories = top_stories
        self.stories = stories or {}
        self.failing = failing or {}
        self.top_error = top_error
        self.requested: list[int] = []

    async def get_top_stories(self) -> list[int]:
        if self.top_error is not None:
            raise TopStoriesFetchError(self.top_error)
        return list(self.top_stories)

    async def get_story(self, story_id: int) -> Story | None:
        self.requested.append(story_id)
        if story_id in self.failing:
            raise StoryFetchError(story_id, self.failing[story_id])
        return self.stories.get(story_id)


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "max_stories": 3,
        "keywords": ["go"],
        "domain": "example.com",
        "delay": timedelta(milliseconds=100),
        "html_file": None,
        "log_file": "unused.log",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_settings():
    """Factory for valid Settings with test-friendly defaults."""
    return _settings


@pytest.fixture
def make_client():
    """Factory for in-memory story sources."""
    return FakeHackerNewsClient


@pytest.fixture
def scenario_client() -> FakeHackerNewsClient:
    """The three-story listing: keyword hit, domain hit, miss."""
    return FakeHackerNewsClient(
        top_stories=[101, 202, 303],
        stories={
            101: Story(id=101, title="Go is cool", url="https://golang.org"),
            202: Story(id=202, title="Random article", url="https://example.com/abc"),
            303: Story(id=303, title="Rust is also cool", url="https://rust-lang.org"),
        },
    )


@pytest.fixture
def no_sleep() -> Iterator[AsyncMock]:
    """Replace the pipeline's inter-request delay."""
    with patch("hngrep.services.pipeline.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep
