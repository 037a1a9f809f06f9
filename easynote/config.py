"""
Configuration loader for EasyNote AI.
Loads environment variables from .env file.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from easynote.exceptions import NotInitializedError


# Load .env from the project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(ENV_PATH)

DEFAULT_MAX_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_TIMEOUT = 60.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Retry policy, captured by each task at submission time.

    Attributes:
        retry_enabled: Whether failed attempts are retried at all
        max_retry_count: Retries allowed after the first attempt
        retry_delay_ms: Fixed wait before every retry
    """
    retry_enabled: bool = True
    max_retry_count: int = DEFAULT_MAX_RETRY_COUNT
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS

    def __post_init__(self):
        if self.max_retry_count < 0:
            raise ValueError(f"max_retry_count must be >= 0, got {self.max_retry_count}")
        if self.retry_delay_ms < 0:
            raise ValueError(f"retry_delay_ms must be >= 0, got {self.retry_delay_ms}")

    @property
    def max_attempts(self) -> int:
        """Retries a task may make (zero when retries are disabled)."""
        return self.max_retry_count if self.retry_enabled else 0

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000.0


@dataclass(frozen=True)
class AIConfig:
    """
    Application configuration for the chat-completion endpoint.

    Immutable once built. Construct directly or via ``from_env()``.
    """
    base_url: str
    model_id: str
    api_key: str
    retry_enabled: bool = True
    max_retry_count: int = DEFAULT_MAX_RETRY_COUNT
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    timeout: float = DEFAULT_TIMEOUT
    thinking_type: Optional[str] = None
    log_bodies: bool = False

    def __post_init__(self):
        missing = [
            name for name in ("base_url", "model_id", "api_key")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise NotInitializedError(
                f"AI configuration is missing: {', '.join(missing)}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        # OrchestratorConfig raises ValueError on invalid retry settings
        _ = self.orchestrator

    @property
    def orchestrator(self) -> OrchestratorConfig:
        return OrchestratorConfig(
            retry_enabled=self.retry_enabled,
            max_retry_count=self.max_retry_count,
            retry_delay_ms=self.retry_delay_ms,
        )

    @property
    def chat_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    @property
    def auth_header(self) -> str:
        return f"Bearer {self.api_key}"

    @classmethod
    def from_env(cls) -> "AIConfig":
        """
        Build configuration from environment variables.

        Raises:
            NotInitializedError: ARK_BASE_URL, ARK_MODEL_ID or ARK_API_KEY unset
            ValueError: A numeric setting is not a valid number
        """
        return cls(
            base_url=os.getenv("ARK_BASE_URL", ""),
            model_id=os.getenv("ARK_MODEL_ID", ""),
            api_key=os.getenv("ARK_API_KEY", ""),
            retry_enabled=_env_bool("AI_RETRY_ENABLED", True),
            max_retry_count=int(os.getenv("AI_MAX_RETRY_COUNT", str(DEFAULT_MAX_RETRY_COUNT))),
            retry_delay_ms=int(os.getenv("AI_RETRY_DELAY_MS", str(DEFAULT_RETRY_DELAY_MS))),
            timeout=float(os.getenv("AI_TIMEOUT", str(DEFAULT_TIMEOUT))),
            thinking_type=os.getenv("ARK_THINKING_TYPE") or None,
            log_bodies=_env_bool("AI_LOG_BODIES", False),
        )

    def __repr__(self) -> str:
        # Never leak the API key into logs
        return (
            f"AIConfig(base_url={self.base_url!r}, model_id={self.model_id!r}, "
            f"retry_enabled={self.retry_enabled}, max_retry_count={self.max_retry_count}, "
            f"retry_delay_ms={self.retry_delay_ms}, timeout={self.timeout})"
        )
