"""
Application settings.

Every setting comes from the process environment. A ``.env`` file at the
project root is read once at import time and only fills variables that are
not already set.

Usage:
    from cutru_ocr.config import get_config
    config = get_config()
    config.ai.model        # gemini-2.0-flash unless AI_MODEL is set
    config.pdf.render_scale
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar

PROJECT_ROOT = Path(__file__).resolve().parent.parent
GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_MB = 1024 * 1024

T = TypeVar("T")


def _load_dotenv(dotenv_path: Optional[Path] = None) -> None:
    """Fill unset environment variables from KEY=VALUE lines; # starts a comment."""
    path = dotenv_path or PROJECT_ROOT / ".env"
    if not path.is_file():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key and not os.environ.get(key):
            os.environ[key] = value.strip().strip("'\"")


_load_dotenv()


def _env(key: str, cast: Callable[[str], T], default: T) -> T:
    """Read and convert one variable; unset or unparseable values give ``default``."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        return default


def _as_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def _env_bool(key: str, default: bool = False) -> bool:
    return _env(key, _as_bool, default)


def _env_price(key: str) -> Optional[float]:
    return _env(key, float, None)


@dataclass
class AIConfig:
    """Vision model (OCR oracle) settings."""
    provider: str = field(default_factory=lambda: os.environ.get("AI_PROVIDER", "Gemini"))
    api_key: str = field(
        default_factory=lambda: os.environ.get("AI_API_KEY") or os.environ.get("GEMINI_API_KEY", "")
    )
    model: str = field(default_factory=lambda: os.environ.get("AI_MODEL", "gemini-2.0-flash"))
    base_url: str = field(default_factory=lambda: os.environ.get("AI_BASE_URL", ""))
    max_output_tokens: int = field(default_factory=lambda: _env("AI_MAX_OUTPUT_TOKENS", int, 16384))
    timeout_sec: int = field(default_factory=lambda: _env("AI_TIMEOUT_SEC", int, 120))
    concurrency: int = field(default_factory=lambda: _env("AI_OCR_CONCURRENCY", int, 2))

    # Backoff: retry_delay_sec * 2**attempt, max_retries after the first call
    max_retries: int = field(default_factory=lambda: _env("AI_MAX_RETRIES", int, 3))
    retry_delay_sec: float = field(default_factory=lambda: _env("AI_RETRY_DELAY_SEC", float, 2.0))

    # USD per million tokens; unset means cost is not tracked
    input_cost_per_1m_usd: Optional[float] = field(default_factory=lambda: _env_price("AI_INPUT_COST_PER_1M_USD"))
    output_cost_per_1m_usd: Optional[float] = field(default_factory=lambda: _env_price("AI_OUTPUT_COST_PER_1M_USD"))

    @property
    def has_pricing(self) -> bool:
        return self.input_cost_per_1m_usd is not None or self.output_cost_per_1m_usd is not None

    def get_normalized_base_url(self) -> str:
        """
        Base URL to hand to the OpenAI SDK.

        A full ``.../chat/completions`` endpoint is cut back to its base. With
        no URL configured, Gemini gets its OpenAI-compatible endpoint and any
        other provider gets "" (SDK default).
        """
        url = (self.base_url or "").strip().rstrip("/")
        if not url:
            return GEMINI_OPENAI_BASE_URL if self.provider.lower() == "gemini" else ""
        url = url.removesuffix("/chat/completions")
        return url.rstrip("/") + "/"

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> Optional[float]:
        """Cost in USD of one call, or None when no pricing is configured."""
        if not self.has_pricing:
            return None
        input_price = self.input_cost_per_1m_usd or 0.0
        output_price = self.output_cost_per_1m_usd or 0.0
        return (input_tokens * input_price + output_tokens * output_price) / 1_000_000


@dataclass
class PDFConfig:
    """CT3A table PDF uploads."""
    render_scale: float = field(default_factory=lambda: _env("PDF_RENDER_SCALE", float, 2.0))
    max_file_size_mb: int = field(default_factory=lambda: _env("PDF_MAX_FILE_SIZE_MB", int, 7))

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * _MB


@dataclass
class ImageConfig:
    """Household image uploads."""
    max_file_size_mb: int = field(default_factory=lambda: _env("IMAGE_MAX_FILE_SIZE_MB", int, 10))
    allowed_mime_types: Tuple[str, ...] = ("image/jpeg", "image/png", "image/webp", "image/gif")

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * _MB


@dataclass
class Config:
    """
    Top-level settings.

    ``output_dir`` and ``logs_dir`` default to OUTPUT_DIR / LOG_DIR resolved
    against the project root (absolute values are used as given).
    DEBUG=1 turns on verbose console logging and raw response dumps.
    """

    base_dir: Path = field(default_factory=lambda: PROJECT_ROOT)
    output_dir: Path = field(default=None)
    logs_dir: Path = field(default=None)

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG"))
    log_to_file: bool = field(default_factory=lambda: _env_bool("LOG_TO_FILE", True))

    ai: AIConfig = field(default_factory=AIConfig)
    pdf: PDFConfig = field(default_factory=PDFConfig)
    image: ImageConfig = field(default_factory=ImageConfig)

    def __post_init__(self):
        if self.output_dir is None:
            self.output_dir = self.base_dir / os.environ.get("OUTPUT_DIR", "output")
        if self.logs_dir is None:
            self.logs_dir = self.base_dir / os.environ.get("LOG_DIR", "logs")

    @property
    def dump_raw_responses(self) -> bool:
        """Keep raw oracle replies on page results."""
        return self.debug or _env_bool("DUMP_RAW_RESPONSES")


_config: Optional[Config] = None


def get_config() -> Config:
    """Process-wide settings, built on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment."""
    global _config
    _config = None
