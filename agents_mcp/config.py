"""Process-wide settings, read once from the environment at startup."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .presets import EFFORT_LEVELS

DEFAULT_BASE_URL = "http://127.0.0.1:3030/v1"
DEFAULT_API_KEY = "optional"
DEFAULT_MODEL = "gpt-5.3-codex"
DEFAULT_TIMEOUT_MS = 300_000
DEFAULT_PRESETS_DIR = Path("~/.agents-mcp/presets")


@dataclass(frozen=True)
class Settings:
    """Defaults applied when neither the caller nor a preset sets a value.

    Built once by the CLI and handed to every component constructor; nothing
    else in the package reads ``os.environ``.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str = DEFAULT_API_KEY
    model: str = DEFAULT_MODEL
    effort: str | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    allow_custom_base_url: bool = True
    presets_dir: Path = DEFAULT_PRESETS_DIR

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``AGENT_*`` / ``PRESETS_DIR`` variables.

        Raises ``ValueError`` for a non-numeric or non-positive timeout and
        for an ``AGENT_EFFORT`` outside the known levels.
        """
        env = os.environ if environ is None else environ

        raw_timeout = env.get("AGENT_TIMEOUT_MS", "").strip()
        try:
            timeout_ms = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_MS
        except ValueError:
            raise ValueError(f"AGENT_TIMEOUT_MS must be an integer, got {raw_timeout!r}") from None
        if timeout_ms <= 0:
            raise ValueError(f"AGENT_TIMEOUT_MS must be positive, got {timeout_ms}")

        effort = env.get("AGENT_EFFORT", "").strip().lower() or None
        if effort is not None and effort not in EFFORT_LEVELS:
            raise ValueError(
                f"AGENT_EFFORT must be one of {', '.join(EFFORT_LEVELS)}, got {effort!r}"
            )

        presets_dir = env.get("PRESETS_DIR", "").strip()
        return cls(
            base_url=env.get("AGENT_API_BASE") or DEFAULT_BASE_URL,
            api_key=env.get("AGENT_API_KEY") or DEFAULT_API_KEY,
            model=env.get("AGENT_MODEL") or DEFAULT_MODEL,
            effort=effort,
            timeout_ms=timeout_ms,
            # Only the literal "false" disables custom endpoints
            allow_custom_base_url=env.get("AGENT_ALLOW_CUSTOM_BASE_URL", "").strip().lower() != "false",
            presets_dir=Path(presets_dir).expanduser().resolve() if presets_dir
            else DEFAULT_PRESETS_DIR.expanduser(),
        )
