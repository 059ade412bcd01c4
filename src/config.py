import os
import re
from dataclasses import dataclass, replace


DEFAULT_BASE_URL = "http://localhost:3000/"

# /signup or /trial is an assumption about the CTA target until the page ships.
DEFAULT_CTA_URL_PATTERN = r"\/(signup|trial)(\/)?"


class ConfigError(ValueError):
    """Raised when an environment option holds an unusable value."""


def _env_int(env: dict, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer (got {raw!r})") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    step_timeout_ms: int = 5000
    navigation_timeout_ms: int = 30000
    poll_interval_ms: int = 100
    screenshot_delay_ms: int = 2000
    cta_url_pattern: str = DEFAULT_CTA_URL_PATTERN

    def __post_init__(self):
        for name in ("step_timeout_ms", "navigation_timeout_ms", "poll_interval_ms", "screenshot_delay_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer (got {value!r})")
        try:
            re.compile(self.cta_url_pattern)
        except re.error as e:
            raise ConfigError(f"cta_url_pattern is not a valid regex: {e}") from None

    @classmethod
    def from_env(cls, env: dict | None = None) -> "Settings":
        env = os.environ if env is None else env
        cta = env.get("CTA_URL_PATTERN") or DEFAULT_CTA_URL_PATTERN
        try:
            re.compile(cta)
        except re.error as e:
            raise ConfigError(f"CTA_URL_PATTERN is not a valid regex: {e}") from None
        return cls(
            base_url=env.get("BASE_URL") or DEFAULT_BASE_URL,
            step_timeout_ms=_env_int(env, "STEP_TIMEOUT_MS", cls.step_timeout_ms),
            navigation_timeout_ms=_env_int(env, "NAVIGATION_TIMEOUT_MS", cls.navigation_timeout_ms),
            poll_interval_ms=_env_int(env, "POLL_INTERVAL_MS", cls.poll_interval_ms),
            screenshot_delay_ms=_env_int(env, "SCREENSHOT_DELAY_MS", cls.screenshot_delay_ms),
            cta_url_pattern=cta,
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied (CLI flags win over env)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def step_timeout(self) -> float:
        return self.step_timeout_ms / 1000

    @property
    def poll_interval(self) -> float:
        return max(self.poll_interval_ms, 1) / 1000

    @property
    def cta_url(self) -> re.Pattern:
        return re.compile(self.cta_url_pattern, re.I)
