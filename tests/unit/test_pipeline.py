"""Unit tests for Pipeline."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import respx
from httpx import Response

from hngrep.clients.hackernews import HackerNewsClient, TopStoriesFetchError
from hngrep.models import Story
from hngrep.services.match_log import LogWriteError, MatchLog
from hngrep.services.pipeline import Pipeline
from hngrep.services.report import RenderError, ReportService


class TestPipelineScenario:
    """End-to-end run over an in-memory story source."""

    async def test_keyword_and_domain_matches(
        self, scenario_client, make_settings, no_sleep: AsyncMock, tmp_path: Path
    ) -> None:
        """101 matches by keyword, 202 by domain, 303 not at all."""
        log_path = tmp_path / "matches.log"
        html_path = tmp_path / "grep.html"
        settings = make_settings(log_file=log_path, html_file=html_path)

        with log_path.open("a+", encoding="utf-8") as f:
            pipeline = Pipeline(
                scenario_client, settings, report=ReportService(), match_log=MatchLog(f)
            )
            result = await pipeline.run()

        assert result.stories_matched == 2
        assert [s.id for s in result.matched] == [101, 202]
        assert result.stories_examined == 3
        assert result.html_written
        assert result.log_sorted

        log_lines = log_path.read_text().splitlines()
        assert len(log_lines) == 2
        assert any('[MATCH] Title: "Go is cool"' in line for line in log_lines)
        assert any('[MATCH] Title: "Random article"' in line for line in log_lines)
        assert "Rust is also cool" not in log_path.read_text()

        html = html_path.read_text()
        assert "Go is cool" in html
        assert "Random article" in html
        assert "Rust is also cool" not in html

    async def test_domain_short_circuits_keywords(
        self, make_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        """A domain hit alone is enough; both are never required together."""
        client = make_client(
            top_stories=[1],
            stories={1: Story(id=1, title="No keyword here", url="https://EXAMPLE.com/x")},
        )
        result = await Pipeline(client, make_settings(keywords=["zig"])).run()

        assert [s.id for s in result.matched] == [1]


class TestPipelineIteration:
    """Tests for ordering, limits and delays."""

    async def test_respects_max_stories_and_order(
        self, make_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        client = make_client(
            top_stories=[5, 4, 3, 2, 1],
            stories={i: Story(id=i, title=f"go {i}") for i in range(1, 6)},
        )
        result = await Pipeline(client, make_settings(max_stories=3)).run()

        assert client.requested == [5, 4, 3]
        assert [s.id for s in result.matched] == [5, 4, 3]
        assert result.stories_listed == 5

    async def test_short_listing(self, make_client, make_settings, no_sleep: AsyncMock) -> None:
        client = make_client(top_stories=[1], stories={1: Story(id=1, title="go")})
        result = await Pipeline(client, make_settings(max_stories=250)).run()

        assert client.requested == [1]
        assert result.stories_examined == 1

    async def test_sleeps_after_every_story(
        self, make_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        """The delay applies after each ID, including failed and missing ones."""
        client = make_client(
            top_stories=[1, 2, 3],
            stories={1: Story(id=1, title="go")},
            failing={2: "HTTP 500"},
        )
        await Pipeline(client, make_settings(delay="250ms")).run()

        assert no_sleep.await_count == 3
        for call in no_sleep.await_args_list:
            assert call.args[0] == pytest.approx(0.25)

    async def test_empty_listing(self, make_client, make_settings, no_sleep: AsyncMock) -> None:
        result = await Pipeline(make_client(top_stories=[]), make_settings()).run()

        assert result.stories_matched == 0
        assert no_sleep.await_count == 0


class TestPipelineErrors:
    """Tests for recoverable and fatal failures."""

    async def test_failed_and_missing_stories_are_skipped(
        self, make_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        client = make_client(
            top_stories=[1, 2, 3, 4],
            stories={1: Story(id=1, title="go one"), 2: None, 4: Story(id=4, title="go four")},
            failing={3: "timeout"},
        )
        result = await Pipeline(client, make_settings(max_stories=10)).run()

        assert [s.id for s in result.matched] == [1, 4]
        assert result.stories_failed == 1
        assert result.stories_not_found == 1
        assert result.stories_examined == 2

    async def test_top_stories_failure_is_fatal(
        self, make_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        client = make_client(top_stories=[], top_error="HTTP 503")
        report = MagicMock(spec=ReportService)

        with pytest.raises(TopStoriesFetchError, match="HTTP 503"):
            await Pipeline(client, make_settings(html_file="grep.html"), report=report).run()

        report.write.assert_not_called()
        assert client.requested == []

    async def test_render_error_surfaces_after_loop(
        self, scenario_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        report = MagicMock(spec=ReportService)
        report.write.side_effect = RenderError("disk full")

        pipeline = Pipeline(scenario_client, make_settings(html_file="grep.html"), report=report)
        with pytest.raises(RenderError):
            await pipeline.run()

        assert scenario_client.requested == [101, 202, 303]
        report.write.assert_called_once()
        matched = report.write.call_args[0][3]
        assert [s.id for s in matched] == [101, 202]

    async def test_log_write_error_is_fatal(
        self, scenario_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        match_log = MagicMock(spec=MatchLog)
        match_log.record.side_effect = LogWriteError("read-only file system")

        with pytest.raises(LogWriteError):
            await Pipeline(scenario_client, make_settings(), match_log=match_log).run()

        match_log.finalize.assert_not_called()

    async def test_outputs_are_optional(
        self, scenario_client, make_settings, no_sleep: AsyncMock
    ) -> None:
        result = await Pipeline(scenario_client, make_settings()).run()

        assert result.stories_matched == 2
        assert not result.html_written
        assert not result.log_sorted

    @respx.mock
    async def test_malformed_item_is_skipped(self, make_settings, no_sleep: AsyncMock) -> None:
        """An item with non-string fields counts as failed and the run continues."""
        api = "https://hacker-news.firebaseio.com/v0"
        respx.get(f"{api}/topstories.json").mock(return_value=Response(200, json=[1, 2]))
        respx.get(f"{api}/item/1.json").mock(
            return_value=Response(200, json={"id": 1, "title": 42, "url": 7})
        )
        respx.get(f"{api}/item/2.json").mock(return_value=Response(200, json={"title": "go news"}))

        async with HackerNewsClient() as client:
            result = await Pipeline(client, make_settings()).run()

        assert result.stories_failed == 1
        assert [s.id for s in result.matched] == [2]
