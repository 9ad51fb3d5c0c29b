"""Configuration loading for hngrep."""

import re
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from hngrep.clients.hackernews import HACKER_NEWS_API_BASE

MIN_DELAY = timedelta(milliseconds=100)

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Go-style duration components, e.g. "100ms", "1.5s", "1m30s"
DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse a duration string such as ``100ms``, ``2s`` or ``1m30s``.

    Args:
        value: The duration text, optionally signed. A bare ``0`` is accepted.

    Returns:
        The parsed duration.

    Raises:
        ValueError: If the text is not a sequence of number/unit pairs.
    """
    text = value.strip()
    sign = -1.0 if text.startswith("-") else 1.0
    if text[:1] in "+-":
        text = text[1:]
    if text == "0":
        return timedelta(0)

    total = 0.0
    position = 0
    for match in DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if not text or position != len(text):
        raise ValueError(f'invalid duration "{value}"')
    return timedelta(seconds=sign * total)


class Settings(BaseSettings):
    """Run settings, from command line values with HNGREP_ environment fallbacks."""

    model_config = SettingsConfigDict(env_prefix="HNGREP_", frozen=True)

    # Filter settings
    max_stories: int = Field(default=250, description="Maximum number of stories to examine")
    keywords: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validate_default=True,
        description="Keywords matched as whole words against story titles",
    )
    domain: str = Field(default="", description="Substring matched against story URLs")
    delay: timedelta = Field(default=MIN_DELAY, description="Pause after each story request")

    # Output settings
    html_file: Path | None = Field(default=Path("grep.html"), description="HTML report path")
    log_file: Path | None = Field(default=None, description="Match log path")

    # API settings
    api_base_url: str = Field(default=HACKER_NEWS_API_BASE, description="Hacker News API root")
    request_timeout: float = Field(default=10.0, description="HTTP timeout in seconds")

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("max_stories")
    @classmethod
    def validate_max_stories(cls, v: int) -> int:
        """Validate the story budget is positive."""
        if v <= 0:
            raise ValueError("max-stories must be a positive integer")
        return v

    @field_validator("keywords", mode="before")
    @classmethod
    def split_keywords(cls, v: Any) -> list[str]:
        """Split comma-separated keywords, trimming and dropping empty entries."""
        if v is None:
            return []
        raw = v.split(",") if isinstance(v, str) else list(v)

        cleaned: list[str] = []
        seen: set[str] = set()
        for keyword in raw:
            keyword = str(keyword).strip()
            if keyword and keyword.lower() not in seen:
                seen.add(keyword.lower())
                cleaned.append(keyword)
        return cleaned

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: list[str]) -> list[str]:
        """Validate at least one keyword survived trimming."""
        if not v:
            raise ValueError("keywords must be provided")
        return v

    @field_validator("domain")
    @classmethod
    def strip_domain(cls, v: str) -> str:
        return v.strip()

    @field_validator("delay", mode="before")
    @classmethod
    def parse_delay(cls, v: Any) -> Any:
        """Accept duration strings and plain seconds."""
        if isinstance(v, str):
            return parse_duration(v)
        if isinstance(v, (int, float)):
            return timedelta(seconds=v)
        return v

    @field_validator("delay")
    @classmethod
    def validate_delay(cls, v: timedelta) -> timedelta:
        """Validate the delay meets the 100ms minimum."""
        if v < MIN_DELAY:
            raise ValueError("delay must be greater than or equal to 100ms")
        return v

    @field_validator("html_file", "log_file", mode="before")
    @classmethod
    def blank_path_to_none(cls, v: Any) -> Any:
        """An empty path disables that output."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log-level '{v}' is not one of {', '.join(sorted(LOG_LEVELS))}")
        return level

    @model_validator(mode="after")
    def validate_outputs(self) -> "Settings":
        """Validate at least one output destination is configured."""
        if self.html_file is None and self.log_file is None:
            raise ValueError("an output destination is required (html-file or log-file)")
        return self

    @property
    def delay_seconds(self) -> float:
        return self.delay.total_seconds()
