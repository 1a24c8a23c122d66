"""
config.py — Runtime settings for the extraction pipeline.

ExtractorConfig bundles the few knobs the pipeline exposes: caption
language preference, manual-vs-generated preference, and the HTTP
settings for the two page fetches.  The CLI and API build one from user
input; library callers can also load one from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

# English first.  Tracks in other languages are only used when no requested
# language is available.
_DEFAULT_LANGUAGES: tuple[str, ...] = ("en",)

# Seconds before a single HTTP request is abandoned.
_DEFAULT_TIMEOUT = 15.0

# YouTube serves a stripped-down page to unknown clients, so we present as a
# regular desktop browser.
_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

_ENV_PREFIX = "YT_PAGE_TRANSCRIPT_"

_TRUTHY = {"1", "true", "yes", "on"}


def parse_languages(raw: str | None) -> tuple[str, ...] | None:
    """
    Split a comma-separated language list ("de, en") into a tuple.

    Returns None for empty input so callers can fall back to the default.
    """
    if not raw:
        return None
    codes = tuple(code.strip() for code in raw.split(",") if code.strip())
    return codes or None


@dataclass(frozen=True)
class CaptionPreference:
    """
    Deterministic caption-track preference order.

    Attributes:
        languages:     Language codes in descending priority.  A code also
                       matches regional variants ("en" matches "en-GB").
        prefer_manual: When True, a creator-authored track beats an
                       auto-generated (ASR) one in the same language.
    """
    languages: tuple[str, ...] = _DEFAULT_LANGUAGES
    prefer_manual: bool = True


@dataclass(frozen=True)
class ExtractorConfig:
    """Settings for one fetch_transcript() call."""
    languages: tuple[str, ...] = _DEFAULT_LANGUAGES
    prefer_manual: bool = True
    timeout: float = _DEFAULT_TIMEOUT
    user_agent: str = _DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"

    @property
    def caption_preference(self) -> CaptionPreference:
        return CaptionPreference(
            languages=self.languages,
            prefer_manual=self.prefer_manual,
        )

    @property
    def request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
        }

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ExtractorConfig:
        """
        Build a config from YT_PAGE_TRANSCRIPT_* environment variables.

        Recognised variables: LANGUAGES (comma list), PREFER_MANUAL
        (true/false), TIMEOUT (seconds).  Unset variables keep defaults.

        Raises:
            ValueError: If TIMEOUT is not a number.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        languages = parse_languages(env.get(f"{_ENV_PREFIX}LANGUAGES"))
        if languages:
            kwargs["languages"] = languages

        prefer_manual = env.get(f"{_ENV_PREFIX}PREFER_MANUAL")
        if prefer_manual is not None:
            kwargs["prefer_manual"] = prefer_manual.strip().lower() in _TRUTHY

        timeout = env.get(f"{_ENV_PREFIX}TIMEOUT")
        if timeout:
            try:
                kwargs["timeout"] = float(timeout)
            except ValueError:
                raise ValueError(
                    f"{_ENV_PREFIX}TIMEOUT must be a number of seconds, got {timeout!r}"
                ) from None

        return cls(**kwargs)
