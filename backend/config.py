"""Centralised settings for the business-profile backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123 Safari/537.36 BBBProfileBot/1.0"
)

_DEFAULT_FALLBACK_PATHS = (
    "about,about-us,contact,locations,hours,menu,privacy,legal,store-locator"
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(p.strip().strip("/") for p in raw.split(",") if p.strip())


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CRAWL_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "10.0"))
    )

    # ------------------------------------------------------------------
    # Site walker
    # ------------------------------------------------------------------
    crawl_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_PAGES", "30"))
    )
    crawl_max_depth: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_DEPTH", "2"))
    )
    crawl_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_CONCURRENCY", "4"))
    )
    crawl_deadline: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_DEADLINE", "45.0"))
    )
    crawl_min_content_chars: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MIN_CONTENT_CHARS", "40"))
    )
    crawl_fallback_paths: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CRAWL_FALLBACK_PATHS", _DEFAULT_FALLBACK_PATHS)
    )
    # "thin" probes only when the corpus is below crawl_min_content_chars,
    # "always" probes every run, "never" disables probing.
    crawl_fallback_policy: str = field(
        default_factory=lambda: os.environ.get("CRAWL_FALLBACK_POLICY", "thin")
    )
    crawl_fallback_within_budget: bool = field(
        default_factory=lambda: _env_bool("CRAWL_FALLBACK_WITHIN_BUDGET", True)
    )

    # ------------------------------------------------------------------
    # Extractors
    # ------------------------------------------------------------------
    lead_form_max_probes: int = field(
        default_factory=lambda: int(os.environ.get("LEAD_FORM_MAX_PROBES", "5"))
    )
    seal_not_found_hint: str = field(
        default_factory=lambda: os.environ.get("SEAL_NOT_FOUND_HINT", "alert")
    )

    # ------------------------------------------------------------------
    # Summarisation model
    # ------------------------------------------------------------------
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openai")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_MODEL", "gpt-4.1")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "llama3.1:8b")
    )
    description_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("DESCRIPTION_MAX_CHARS", "900"))
    )
    summary_corpus_chars: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_CORPUS_CHARS", "60000"))
    )

    @property
    def has_llm_credentials(self) -> bool:
        """``True`` when the configured provider can be called."""
        if self.llm_provider == "openai":
            return bool(os.environ.get("OPENAI_API_KEY"))
        return True

    @property
    def active_model(self) -> str:
        """Name of the chat model the summariser will use."""
        if self.llm_provider == "openai":
            return self.openai_chat_model
        return self.ollama_chat_model


# Module-level singleton; import this everywhere:
#   from backend.config import settings
settings = Settings()
