"""
DisputePilot Configuration

Engine settings read from DP_* environment variables.

    DP_PLATFORM_WALLET              platform recipient address
    DP_PLATFORM_FEE_RATE            platform fee fraction (default 0.10)
    DP_MAX_ATTACHMENTS              attachments per reclamation (default 3)
    DP_PROPERTY_SUSPENSION_POINTS   points that trigger a property suspension recommendation (default 15)
    DP_PENALTY_MATRIX_PATH          optional YAML/JSON matrix pack
    DP_LOG_LEVEL                    log level (default INFO)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_PLATFORM_WALLET = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class EngineSettings:
    platform_wallet: str = DEFAULT_PLATFORM_WALLET
    platform_fee_rate: Decimal = Decimal("0.10")
    max_attachments: int = 3
    property_suspension_points: int = 15
    penalty_matrix_path: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.platform_wallet:
            raise ConfigurationError(message="DP_PLATFORM_WALLET must not be empty")
        if not (Decimal("0") <= self.platform_fee_rate < Decimal("1")):
            raise ConfigurationError(
                message=f"DP_PLATFORM_FEE_RATE must be in [0, 1), got {self.platform_fee_rate}",
            )
        if self.max_attachments < 0:
            raise ConfigurationError(
                message=f"DP_MAX_ATTACHMENTS must be non-negative, got {self.max_attachments}",
            )
        if self.property_suspension_points < 1:
            raise ConfigurationError(
                message=(
                    "DP_PROPERTY_SUSPENSION_POINTS must be positive, "
                    f"got {self.property_suspension_points}"
                ),
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(message=f"DP_LOG_LEVEL not recognized: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        """
        Build settings from the environment.

        Raises:
            ConfigurationError: A variable is present but invalid
        """
        env = os.environ if environ is None else environ
        return cls(
            platform_wallet=env.get("DP_PLATFORM_WALLET", DEFAULT_PLATFORM_WALLET),
            platform_fee_rate=_decimal(env, "DP_PLATFORM_FEE_RATE", "0.10"),
            max_attachments=_int(env, "DP_MAX_ATTACHMENTS", "3"),
            property_suspension_points=_int(env, "DP_PROPERTY_SUSPENSION_POINTS", "15"),
            penalty_matrix_path=env.get("DP_PENALTY_MATRIX_PATH") or None,
            log_level=env.get("DP_LOG_LEVEL", "INFO").upper(),
        )


def _decimal(env: Mapping[str, str], name: str, default: str) -> Decimal:
    raw = env.get(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ConfigurationError(message=f"{name} is not a number: {raw!r}") from e
    if not value.is_finite():
        raise ConfigurationError(message=f"{name} is not a number: {raw!r}")
    return value


def _int(env: Mapping[str, str], name: str, default: str) -> int:
    raw = env.get(name, default)
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(message=f"{name} is not an integer: {raw!r}") from e
