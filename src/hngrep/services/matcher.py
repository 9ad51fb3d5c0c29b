"""Keyword and domain matching for stories."""

import re
from collections.abc import Sequence
from functools import lru_cache

from hngrep.models import Story

# ASCII-only word boundaries: accented letters count as separators
WORD_START = r"(?:^|[^A-Za-z0-9_])"
WORD_END = r"(?:$|[^A-Za-z0-9_])"


def compile_pattern(keywords: Sequence[str]) -> re.Pattern[str]:
    """Compile one case-insensitive pattern matching any keyword as a whole word.

    Keywords are escaped, so ``c++`` matches the literal text ``c++``.

    Example: ``["go", "c++"]`` becomes
    ``(?:^|[^A-Za-z0-9_])(?:go|c\\+\\+)(?:$|[^A-Za-z0-9_])``.
    """
    return _compile(tuple(keywords))


@lru_cache(maxsize=32)
def _compile(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(f"{WORD_START}(?:{alternatives}){WORD_END}", re.IGNORECASE)


def matches(story: Story, keywords: Sequence[str], domain: str = "") -> bool:
    """Check whether a story matches the domain filter or any keyword.

    A domain hit short-circuits the keyword check: a story whose URL contains
    ``domain`` (case-insensitive) matches even if its title has no keyword.

    Args:
        story: The story to check.
        keywords: Non-empty list of trimmed keywords.
        domain: Substring to look for in the story URL. Empty disables it.

    Returns:
        True if the story matched.
    """
    if domain and domain.lower() in story.url.lower():
        return True

    return compile_pattern(keywords).search(story.title) is not None
