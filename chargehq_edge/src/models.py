"""
Pydantic models for site telemetry snapshots and the ChargeHQ push payload.

Defines the SiteMeters model that represents one polling cycle's site power
and energy figures after SunSpec scale factors have been applied, the
ChargeHqPayload wrapper whose JSON shape is fixed by the ChargeHQ push API,
and DeviceInfo for the inverter identification read at startup.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SiteMeters(BaseModel):
    """A complete telemetry snapshot for one polling cycle.

    Instances are immutable and always carry all five values.

    Attributes:
        consumption_kw: Site load in kW (production plus net import).
        net_import_kw: Grid exchange in kW.
            Positive = importing, negative = exporting.
        production_kw: Inverter AC output in kW.
        exported_kwh: Lifetime energy exported to the grid in kWh.
        imported_kwh: Lifetime energy imported from the grid in kWh.
    """

    model_config = ConfigDict(frozen=True)

    consumption_kw: float
    net_import_kw: float
    production_kw: float
    exported_kwh: float
    imported_kwh: float


class ChargeHqPayload(BaseModel):
    """Body of a ChargeHQ ``push-solar-data`` request.

    Serialized with camelCase aliases: ``{"apiKey": ..., "siteMeters": {...}}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(alias="apiKey")
    site_meters: SiteMeters = Field(alias="siteMeters")

    def to_json(self) -> str:
        """Serialize using the wire field names."""
        return self.model_dump_json(by_alias=True)


class DeviceInfo(BaseModel):
    """Inverter identification from the SunSpec common block."""

    model_config = ConfigDict(frozen=True)

    manufacturer: str
    model: str
    version: str
    serial_number: str
