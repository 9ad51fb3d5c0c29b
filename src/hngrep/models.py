"""Shared data models for hngrep."""

from dataclasses import dataclass

DISCUSSION_URL_TEMPLATE = "https://news.ycombinator.com/item?id={id}"


def _text_field(data: dict, key: str) -> str:
    """Read an optional string field, treating absent or null as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Story:
    """A Hacker News story as returned by the item endpoint."""

    id: int
    title: str = ""
    url: str = ""

    @property
    def discussion_url(self) -> str:
        """Link to the story's comment thread on Hacker News."""
        return DISCUSSION_URL_TEMPLATE.format(id=self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "Story":
        """Create a Story from item endpoint data."""
        return cls(
            id=int(data["id"]),
            title=_text_field(data, "title"),
            url=_text_field(data, "url"),
        )


@dataclass(frozen=True)
class MatchResult:
    """Outcome of running the filter on one story."""

    story: Story
    matched: bool
