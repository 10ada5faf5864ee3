"""Runtime configuration for download runs."""

import os
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from .fetchers.base import RenderingSession

ENV_PREFIX = "PHOTO_FETCHER_"
RENDERERS = ("playwright", "http")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class DownloaderConfig:
    """Settings for one download run."""

    manifest_path: Optional[str] = None
    output_folder: Optional[str] = None
    renderer: str = "playwright"
    headless: bool = True
    launch_timeout_ms: int = 60000
    navigation_timeout_ms: int = 30000
    user_agent: Optional[str] = None
    checkpoint_interval: int = 10
    limit: Optional[int] = None
    log_level: str = "INFO"
    log_dir: str = "logs"
    json_logs: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> 'DownloaderConfig':
        """
        Build configuration from PHOTO_FETCHER_* environment variables.

        Args:
            **overrides: Values taking precedence over the environment;
                None values are ignored

        Returns:
            DownloaderConfig instance
        """
        defaults = cls()
        config = cls(
            manifest_path=os.getenv(f"{ENV_PREFIX}MANIFEST", defaults.manifest_path),
            output_folder=os.getenv(f"{ENV_PREFIX}OUTPUT", defaults.output_folder),
            renderer=os.getenv(f"{ENV_PREFIX}RENDERER", defaults.renderer).strip().lower(),
            headless=_env_bool(f"{ENV_PREFIX}HEADLESS", defaults.headless),
            launch_timeout_ms=_env_int(f"{ENV_PREFIX}LAUNCH_TIMEOUT_MS", defaults.launch_timeout_ms),
            navigation_timeout_ms=_env_int(
                f"{ENV_PREFIX}NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms
            ),
            user_agent=os.getenv(f"{ENV_PREFIX}USER_AGENT", defaults.user_agent),
            checkpoint_interval=_env_int(
                f"{ENV_PREFIX}CHECKPOINT_INTERVAL", defaults.checkpoint_interval
            ),
            limit=_env_int(f"{ENV_PREFIX}LIMIT", defaults.limit),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level),
            log_dir=os.getenv(f"{ENV_PREFIX}LOG_DIR", defaults.log_dir),
            json_logs=_env_bool(f"{ENV_PREFIX}JSON_LOGS", defaults.json_logs),
        )

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        return replace(config, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self):
        """
        Check the configuration before a run.

        Raises:
            ValueError: On missing paths or out-of-range values
        """
        if not self.manifest_path:
            raise ValueError("manifest_path is required")
        if not self.output_folder:
            raise ValueError("output_folder is required")
        if self.renderer not in RENDERERS:
            raise ValueError(f"renderer must be one of {RENDERERS}, got {self.renderer!r}")
        if self.checkpoint_interval <= 0:
            raise ValueError(
                f"checkpoint_interval must be positive, got {self.checkpoint_interval}"
            )
        if self.launch_timeout_ms <= 0 or self.navigation_timeout_ms <= 0:
            raise ValueError("timeouts must be positive")
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must not be negative, got {self.limit}")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ValueError(f"log_level must be a standard level name, got {self.log_level!r}")

    def create_session(self) -> RenderingSession:
        """Open the rendering session this configuration selects."""
        if self.renderer == "http":
            from .fetchers.http_session import HttpSession
            return HttpSession(
                timeout=self.navigation_timeout_ms / 1000,
                user_agent=self.user_agent
            )

        from .fetchers.playwright_session import PlaywrightSession
        return PlaywrightSession(
            headless=self.headless,
            launch_timeout_ms=self.launch_timeout_ms,
            navigation_timeout_ms=self.navigation_timeout_ms,
            user_agent=self.user_agent
        )
