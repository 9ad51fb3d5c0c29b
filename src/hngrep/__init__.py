"""hngrep: keyword and domain filter for Hacker News top stories."""

__version__ = "0.1.0"
