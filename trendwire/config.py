"""Runtime settings read from environment variables."""

import os
from typing import Mapping, Optional, TypedDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(TypedDict):
    """Transport and locale defaults."""

    host: str
    hl: str
    tz: int
    timeout: float
    user_agent: str


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``TRENDWIRE_*`` environment variables.

    Args:
        environ: Mapping to read from.  Defaults to ``os.environ``.

    Returns:
        Settings with defaults filled in for unset variables.

    Raises:
        ValueError: If ``TRENDWIRE_TZ`` or ``TRENDWIRE_TIMEOUT`` is not
            numeric.
    """
    env = os.environ if environ is None else environ
    return {
        "host": env.get("TRENDWIRE_HOST", "trends.google.com"),
        "hl": env.get("TRENDWIRE_HL", "en-US"),
        "tz": _number(env, "TRENDWIRE_TZ", "240", int),
        "timeout": _number(env, "TRENDWIRE_TIMEOUT", "30", float),
        "user_agent": env.get("TRENDWIRE_USER_AGENT", DEFAULT_USER_AGENT),
    }


def _number(env, name, default, cast):
    raw = env.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Environment variable '{name}' must be numeric, "
                         f"got {raw!r}") from None
