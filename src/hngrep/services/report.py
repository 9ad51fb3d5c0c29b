"""HTML report rendering for hngrep."""

import html
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from hngrep.models import Story
from hngrep.utils.logging import get_logger

logger = get_logger(__name__)


class RenderError(Exception):
    """Raised when the HTML report cannot be written."""


class ReportService:
    """Renders matched stories to a static HTML page."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def write(
        self,
        path: Path,
        keywords: Sequence[str],
        domain: str,
        stories: Sequence[Story],
    ) -> None:
        """Render the report and write it to ``path``, replacing any old report.

        Raises:
            RenderError: If the file cannot be written.
        """
        page = self.render_html(keywords, domain, stories)
        try:
            path.write_text(page, encoding="utf-8")
        except OSError as e:
            raise RenderError(f"failed to write HTML file {str(path)!r}: {e}") from e
        logger.info("HTML report written", path=str(path), stories=len(stories))

    def render_html(
        self,
        keywords: Sequence[str],
        domain: str,
        stories: Sequence[Story],
    ) -> str:
        """Render the report page.

        Args:
            keywords: The configured keywords, shown comma-joined.
            domain: The configured domain filter, may be empty.
            stories: Matched stories in fetch order.

        Returns:
            The complete HTML document.
        """
        safe_keywords = html.escape(", ".join(keywords))
        safe_domain = html.escape(domain) if domain else "<em>any</em>"
        generated_at = self._clock().strftime("%Y-%m-%d %H:%M")

        if stories:
            stories_html = '<ol class="stories">\n' + "\n".join(
                self._render_story(s) for s in stories
            ) + "\n</ol>"
        else:
            stories_html = '<p class="empty">No stories matched.</p>'

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>hngrep: Hacker News matches</title>
<style>
body {{
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    font-size: 17px;
    max-width: 720px;
    margin: 0 auto;
    padding: 20px;
    color: #333;
    line-height: 1.6;
}}
h1 {{
    color: #1a1a1a;
    font-size: 26px;
    border-bottom: 2px solid #ff6600;
    padding-bottom: 10px;
}}
.filters {{
    background: #f6f6ef;
    padding: 15px 20px;
    border-radius: 8px;
    margin-bottom: 30px;
}}
.filters p {{
    margin: 0 0 0.4em 0;
}}
.stories {{
    padding-left: 1.4em;
}}
.story {{
    margin-bottom: 18px;
}}
.story-title {{
    color: #1a1a1a;
    text-decoration: none;
    font-weight: 600;
}}
.story-title:hover {{
    text-decoration: underline;
}}
.story-links {{
    font-size: 0.85em;
    color: #828282;
}}
.story-links a {{
    color: #828282;
}}
.empty {{
    color: #666;
}}
.footer {{
    margin-top: 40px;
    padding-top: 20px;
    border-top: 1px solid #e0e0e0;
    font-size: 0.9em;
    color: #666;
}}
</style>
</head>
<body>
<h1>Hacker News matches</h1>

<div class="filters">
<p><strong>Keywords:</strong> {safe_keywords}</p>
<p><strong>Domain:</strong> {safe_domain}</p>
</div>

{stories_html}

<div class="footer">
<p>Generated by hngrep on {generated_at}.</p>
</div>
</body>
</html>"""

    def _render_story(self, story: Story) -> str:
        """Render a single matched story as a list item."""
        safe_title = html.escape(story.title or f"Story {story.id}")
        safe_discussion = html.escape(story.discussion_url)

        if story.url:
            safe_url = html.escape(story.url)
            title_html = f'<a href="{safe_url}" class="story-title">{safe_title}</a>'
        else:
            title_html = f'<a href="{safe_discussion}" class="story-title">{safe_title}</a>'

        return f"""<li class="story">
{title_html}
<div class="story-links"><a href="{safe_discussion}">discussion</a></div>
</li>"""
