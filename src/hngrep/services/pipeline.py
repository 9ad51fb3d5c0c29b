"""Fetch, filter and report pipeline for hngrep."""

import asyncio
from dataclasses import dataclass, field

from hngrep.clients.hackernews import HackerNewsAPI, StoryFetchError
from hngrep.config import Settings
from hngrep.models import MatchResult, Story
from hngrep.services.match_log import MatchLog
from hngrep.services.matcher import matches
from hngrep.services.report import ReportService
from hngrep.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Result of one pipeline run."""

    stories_listed: int
    stories_examined: int
    stories_failed: int
    stories_not_found: int
    matched: list[Story] = field(default_factory=list)
    html_written: bool = False
    log_sorted: bool = False

    @property
    def stories_matched(self) -> int:
        return len(self.matched)


class Pipeline:
    """Runs one fetch-filter-report cycle over the top stories."""

    def __init__(
        self,
        client: HackerNewsAPI,
        settings: Settings,
        report: ReportService | None = None,
        match_log: MatchLog | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._report = report
        self._match_log = match_log

    async def run(self) -> PipelineResult:
        """Run the pipeline.

        Stories are fetched one at a time in ranking order, with the
        configured delay after every request.

        Returns:
            PipelineResult with the matched stories and run statistics.

        Raises:
            TopStoriesFetchError: If the top story listing cannot be fetched.
            RenderError: If the HTML report cannot be written.
            LogWriteError: If the match log cannot be written or sorted.
        """
        settings = self._settings
        logger.info(
            "Starting run",
            max_stories=settings.max_stories,
            keywords=settings.keywords,
            domain=settings.domain,
            delay=settings.delay_seconds,
        )

        story_ids = await self._client.get_top_stories()
        selected = story_ids[: settings.max_stories]
        logger.info("Fetched top stories", count=len(story_ids), examining=len(selected))

        result = PipelineResult(
            stories_listed=len(story_ids),
            stories_examined=0,
            stories_failed=0,
            stories_not_found=0,
        )

        for index, story_id in enumerate(selected, start=1):
            outcome = await self._check_story(index, story_id)

            if isinstance(outcome, MatchResult):
                result.stories_examined += 1
                if outcome.matched:
                    if self._match_log is not None:
                        self._match_log.record(outcome.story)
                    result.matched.append(outcome.story)
            elif isinstance(outcome, StoryFetchError):
                result.stories_failed += 1
            else:
                result.stories_not_found += 1

            await asyncio.sleep(settings.delay_seconds)

        logger.info(
            "Matched stories",
            count=result.stories_matched,
            examined=result.stories_examined,
            failed=result.stories_failed,
            not_found=result.stories_not_found,
        )

        if self._report is not None and settings.html_file is not None:
            self._report.write(
                settings.html_file, settings.keywords, settings.domain, result.matched
            )
            result.html_written = True

        if self._match_log is not None:
            self._match_log.finalize()
            result.log_sorted = True

        return result

    async def _check_story(
        self, index: int, story_id: int
    ) -> MatchResult | StoryFetchError | None:
        """Fetch one story and run the filter on it.

        Returns:
            The MatchResult, the StoryFetchError if the fetch failed, or None
            if the story does not exist.
        """
        try:
            story = await self._client.get_story(story_id)
        except StoryFetchError as e:
            logger.warning("Failed to fetch story", story_id=story_id, reason=e.reason)
            return e

        if story is None:
            logger.warning("Story not found", story_id=story_id)
            return None

        matched = matches(story, self._settings.keywords, self._settings.domain)
        logger.info(
            "Story checked",
            index=index,
            story_id=story.id,
            title=story.title,
            match="Yes" if matched else "No",
        )
        return MatchResult(story=story, matched=matched)
