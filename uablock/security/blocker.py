# blocker.py
"""User-Agent blocklist with optional flat-file persistence.

Patterns are lowercase substrings; a User-Agent is blocked when any pattern
occurs in its lowercased form. Every instance starts from
:data:`DEFAULT_PATTERNS`. When created through
:meth:`UserAgentBlocker.from_file` the file's patterns are added on top and
the whole set is rewritten to that file after each successful add or remove.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

logger = logging.getLogger("uablock")

DEFAULT_PATTERNS = (
    "wget",
    "curl",
    "python-requests",
    "python",
    "scrapy",
    "phantomjs",
    "selenium",
    "headless",
    "bot",
    "crawler",
    "spider",
    "scraper",
    "httrack",
    "grabber",
)

FILE_HEADER = "# User agent patterns to block (one per line)"
BLOCK_MESSAGE = "Access denied: User agent contains blocked pattern '{pattern}'"


def denial_message(pattern: str) -> str:
    """Return the rejection text for a request blocked by ``pattern``."""
    return BLOCK_MESSAGE.format(pattern=pattern)


def _normalize(pattern: str) -> str:
    return pattern.strip().lower()


def is_valid_pattern(pattern: str) -> bool:
    """Return ``True`` if the normalized ``pattern`` can be stored.

    Patterns are persisted one per line, so line breaks are rejected.
    """
    return bool(pattern) and "\n" not in pattern and "\r" not in pattern


class UserAgentBlocker:
    """Decide whether a User-Agent string should be blocked."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_PATTERNS):
        self._patterns: set[str] = set()
        self._path: Optional[str] = None
        for pattern in patterns:
            pattern = _normalize(pattern)
            if is_valid_pattern(pattern):
                self._patterns.add(pattern)

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> "UserAgentBlocker":
        """Create a blocker seeded with defaults plus the patterns in ``path``.

        Blank lines, lines starting with ``#`` and lines that are not valid
        UTF-8 are ignored. ``OSError`` is raised when the file cannot be
        opened. The path is remembered and receives the full pattern set on
        every later mutation.
        """

        blocker = cls()
        blocker._path = os.fspath(path)
        with open(blocker._path, "rb") as fh:
            for lineno, raw in enumerate(fh, 1):
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError:
                    logger.warning(
                        "skipping undecodable line %d in %s", lineno, blocker._path
                    )
                    continue
                pattern = _normalize(line)
                if is_valid_pattern(pattern) and not pattern.startswith("#"):
                    blocker._patterns.add(pattern)
        logger.debug(
            "loaded %d user agent patterns from %s", len(blocker._patterns), path
        )
        return blocker

    @property
    def backing_path(self) -> Optional[str]:
        """File the pattern set is saved to, or ``None`` when in-memory only."""
        return self._path

    def __contains__(self, pattern: object) -> bool:
        return isinstance(pattern, str) and _normalize(pattern) in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def should_block(self, user_agent: str) -> bool:
        """Return ``True`` if any pattern occurs in ``user_agent``."""
        user_agent = user_agent.lower()
        return any(pattern in user_agent for pattern in self._patterns)

    def block_reason(self, user_agent: str) -> Optional[str]:
        """Return the pattern that blocks ``user_agent`` or ``None``.

        Patterns are scanned in sorted order so the same input always yields
        the same pattern.
        """

        user_agent = user_agent.lower()
        for pattern in sorted(self._patterns):
            if pattern in user_agent:
                return pattern
        return None

    def add_pattern(self, pattern: str) -> bool:
        """Add ``pattern``; return ``True`` only if it was not present yet.

        Blank patterns and patterns containing line breaks are refused.
        """
        pattern = _normalize(pattern)
        if not is_valid_pattern(pattern) or pattern in self._patterns:
            return False
        self._patterns.add(pattern)
        self._persist()
        return True

    def remove_pattern(self, pattern: str) -> bool:
        """Remove ``pattern``; return ``True`` if it was present."""
        pattern = _normalize(pattern)
        if pattern not in self._patterns:
            return False
        self._patterns.discard(pattern)
        self._persist()
        return True

    def get_patterns(self) -> list[str]:
        """Return a sorted copy of the current patterns."""
        return sorted(self._patterns)

    def save(self) -> None:
        """Rewrite the backing file with the current pattern set."""
        if self._path is None:
            raise ValueError("blocker has no backing file")
        with open(self._path, "w", encoding="utf-8") as fh:
            fh.write(FILE_HEADER + "\n")
            for pattern in sorted(self._patterns):
                fh.write(pattern + "\n")

    def _persist(self) -> None:
        # Write failures leave the in-memory set authoritative.
        if self._path is None:
            return
        try:
            self.save()
        except OSError:
            logger.warning(
                "failed to save user agent patterns to %s", self._path, exc_info=True
            )
