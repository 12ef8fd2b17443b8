"""Process-wide admission settings, read once at startup."""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dracpu.shared.models import DEFAULT_DRIVER_NAME

logger = logging.getLogger(__name__)

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(raw: Any) -> float:
    """
    Parse a duration into seconds.

    Accepts numbers (seconds) and Go-style duration strings such as
    "50ms", "1.5s" or "1m30s".

    Raises:
        ValueError: if the value is not a finite duration.
    """
    if isinstance(raw, bool):
        raise ValueError(f"invalid duration {raw!r}")
    if isinstance(raw, (int, float)):
        try:
            return _finite(float(raw), raw)
        except OverflowError as e:
            raise ValueError(f"invalid duration {raw!r}") from e

    text = str(raw).strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return _finite(seconds, raw)

    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        raise ValueError(f"invalid duration {raw!r}")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART_RE.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {raw!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    return _finite(sign * total, raw)


def _finite(seconds: float, raw: Any) -> float:
    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration {raw!r}")
    return seconds


class AdmissionSettings(BaseSettings):
    """
    Admission webhook settings.

    Environment variables use the DRACPU_ADMISSION_ prefix, e.g.
    DRACPU_ADMISSION_CLAIM_GET_RETRY_WAIT=50ms.

    Duration fields are in seconds. An unparsable duration logs a warning and
    keeps the default.
    """

    model_config = SettingsConfigDict(env_prefix="DRACPU_ADMISSION_", frozen=True)

    driver_name: str = Field(
        default=DEFAULT_DRIVER_NAME,
        description="DRA driver name to validate for",
    )
    claim_get_retry_wait: float = Field(
        default=0.05,
        description="Delay between ResourceClaim get retries when the claim is not found",
    )
    claim_get_retry_total: float = Field(
        default=0.5,
        description="Total ResourceClaim get retry window when the claim is not found",
    )
    admission_review_timeout: float = Field(
        default=8.0,
        gt=0,
        description="Deadline for validating one admission request",
    )
    count_allocated_devices: bool = Field(
        default=False,
        description="Count allocated claims from their devices instead of rejecting them",
    )

    @field_validator(
        "claim_get_retry_wait",
        "claim_get_retry_total",
        "admission_review_timeout",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        try:
            return parse_duration(value)
        except ValueError as e:
            logger.warning("invalid %s=%r: %s; using %s", info.field_name, value, e, default)
            return default
