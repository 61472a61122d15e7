"""
Edge daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All configuration values come from environment variables or .env files;
no hardcoded IPs or credentials.

CHANGELOG:
- 2026-10-19: Add METER_EXPORT_POSITIVE for meter polarity calibration
- 2026-10-19: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class EdgeSettings(BaseSettings):
    """Edge daemon configuration for the SolarEdge-to-ChargeHQ pipeline.

    All values are loaded from environment variables. Required variables
    must be set; optional variables have sensible defaults.

    Attributes:
        solaredge_host: Inverter IP address / hostname on local LAN.
        solaredge_port: Modbus TCP port (SolarEdge default 1502).
        solaredge_slave_id: Modbus slave / unit ID (default 1).
        chargehq_api_key: ChargeHQ API key sent with every payload.
        poll_interval_s: Seconds to sleep between ticks.
        modbus_timeout_s: Timeout per Modbus TCP request in seconds.
        retry_base_delay_ms: Unit of the Fibonacci retry delay sequence.
        retry_max_attempts: Attempts per tick before the tick is skipped.
        meter_export_positive: True when the meter reports export as a
            positive M_AC_Power (SolarEdge export-point meter).
        health_path: Health JSON file path; empty disables the file.
    """

    solaredge_host: str
    solaredge_port: int = 1502
    solaredge_slave_id: int = 1
    chargehq_api_key: str
    poll_interval_s: int = 35
    modbus_timeout_s: float = 10.0
    retry_base_delay_ms: int = 10
    retry_max_attempts: int = 5
    meter_export_positive: bool = True
    health_path: str = ""

    @field_validator("chargehq_api_key")
    @classmethod
    def chargehq_api_key_must_not_be_empty(cls, v: str) -> str:
        """Reject an empty API key at startup."""
        if not v.strip():
            raise ValueError("CHARGEHQ_API_KEY must not be empty")
        return v

    @field_validator("solaredge_port")
    @classmethod
    def solaredge_port_must_be_valid(cls, v: int) -> int:
        """Validate Modbus TCP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("SOLAREDGE_PORT must be between 1 and 65535")
        return v

    @field_validator("solaredge_slave_id")
    @classmethod
    def solaredge_slave_id_must_be_valid(cls, v: int) -> int:
        """Validate Modbus slave ID is in valid range (1-247)."""
        if v < 1 or v > 247:
            raise ValueError("SOLAREDGE_SLAVE_ID must be between 1 and 247")
        return v

    @field_validator("poll_interval_s")
    @classmethod
    def poll_interval_must_be_positive(cls, v: int) -> int:
        """Validate poll interval is at least one second."""
        if v < 1:
            raise ValueError("POLL_INTERVAL_S must be >= 1")
        return v

    @field_validator("modbus_timeout_s")
    @classmethod
    def modbus_timeout_must_be_positive(cls, v: float) -> float:
        """Validate Modbus request timeout is positive."""
        if v <= 0:
            raise ValueError("MODBUS_TIMEOUT_S must be > 0")
        return v

    @field_validator("retry_base_delay_ms")
    @classmethod
    def retry_base_delay_must_be_non_negative(cls, v: int) -> int:
        """Validate retry base delay is non-negative."""
        if v < 0:
            raise ValueError("RETRY_BASE_DELAY_MS must be >= 0")
        return v

    @field_validator("retry_max_attempts")
    @classmethod
    def retry_max_attempts_must_be_valid(cls, v: int) -> int:
        """Validate retry attempts is between 1 and 20."""
        if v < 1 or v > 20:
            raise ValueError("RETRY_MAX_ATTEMPTS must be >= 1 and <= 20")
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
