"""
Runtime settings.

Defaults describe the OSCAR schedule PDF. The timezone and the output mode can
be overridden through the environment:

    OSCAR_ICS_TIMEZONE=America/Chicago
    OSCAR_ICS_OUTPUT_MODE=local
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIMEZONE_ENV_VAR = "OSCAR_ICS_TIMEZONE"
OUTPUT_MODE_ENV_VAR = "OSCAR_ICS_OUTPUT_MODE"

OUTPUT_MODES = ("utc", "local")


@dataclass(frozen=True)
class Settings:
    timezone: str = "America/New_York"
    output_mode: str = "utc"
    header_label: str = "Title"
    footer_label: str = "Total Hours"
    product_id: str = "OSCAR to ICS//EN"
    default_calendar_name: str = "Schedule"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def validate(self) -> "Settings":
        """
        Raise ValueError for an unknown timezone or output mode.
        """
        if self.output_mode not in OUTPUT_MODES:
            raise ValueError(f"Unknown output mode: {self.output_mode!r} (expected one of {', '.join(OUTPUT_MODES)})")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.timezone!r}") from exc
        return self


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    timezone: Optional[str] = None,
    output_mode: Optional[str] = None,
) -> Settings:
    """
    Build Settings from defaults, then the environment, then explicit arguments.
    """
    env = os.environ if env is None else env
    settings = Settings()

    env_tz = (env.get(TIMEZONE_ENV_VAR) or "").strip()
    if env_tz:
        settings = replace(settings, timezone=env_tz)
    env_mode = (env.get(OUTPUT_MODE_ENV_VAR) or "").strip().lower()
    if env_mode:
        settings = replace(settings, output_mode=env_mode)

    if timezone:
        settings = replace(settings, timezone=timezone)
    if output_mode:
        settings = replace(settings, output_mode=output_mode)

    return settings.validate()
