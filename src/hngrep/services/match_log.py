"""Append-only match log with end-of-run sorting."""

import io
from collections.abc import Callable
from datetime import datetime
from typing import TextIO

from hngrep.models import Story
from hngrep.utils.logging import get_logger

logger = get_logger(__name__)

MATCH_TAG = "[MATCH]"

# Fixed-width and zero-padded, so lines sort chronologically as plain strings.
# Re-derive the sort key in sort_log_file if this format ever changes.
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


class LogWriteError(Exception):
    """Raised when the match log cannot be written or rewritten."""


def format_entry(story: Story, timestamp: datetime) -> str:
    """Format one match log line (without the trailing newline).

    Line breaks in the title or URL become spaces so each entry stays on one line.
    """
    title = " ".join(story.title.splitlines())
    url = " ".join(story.url.splitlines())
    return f'{timestamp.strftime(TIMESTAMP_FORMAT)} {MATCH_TAG} Title: "{title}" URL: {url}'


def sort_log_file(file: TextIO) -> None:
    """Rewrite a match log so it holds only tagged lines, most recent first.

    Untagged lines are dropped. The file is truncated even when no tagged
    line survives; an empty file is left untouched.

    Args:
        file: An open, readable and writable text handle.

    Raises:
        LogWriteError: If reading, truncating or writing fails.
    """
    try:
        file.seek(0)
        content = file.read()
        if not content:
            return

        entries = [line.strip() for line in content.splitlines()]
        entries = [line for line in entries if MATCH_TAG in line]
        entries.sort(reverse=True)

        file.seek(0)
        file.truncate()
        for entry in entries:
            file.write(entry + "\n")
        file.flush()
    except OSError as e:
        raise LogWriteError(f"failed to sort match log: {e}") from e

    logger.info("Match log sorted", entries=len(entries))


class MatchLog:
    """Writes match entries to a log file for the duration of one run."""

    def __init__(self, file: TextIO, clock: Callable[[], datetime] = datetime.now) -> None:
        self._file = file
        self._clock = clock
        self.entries_written = 0

    def record(self, story: Story) -> None:
        """Append a match entry for the story.

        Raises:
            LogWriteError: If the entry cannot be written.
        """
        line = format_entry(story, self._clock())
        try:
            self._file.seek(0, io.SEEK_END)
            self._file.write(line + "\n")
            self._file.flush()
        except OSError as e:
            raise LogWriteError(f"failed to write match log entry: {e}") from e
        self.entries_written += 1

    def finalize(self) -> None:
        """Sort the log once the run has finished writing."""
        sort_log_file(self._file)
