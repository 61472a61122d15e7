"""
Telemetry aggregation: one polling cycle's reads combined into SiteMeters.

Runs the fixed read sequence against an already-connected Modbus client:

1. Inverter AC power + I_AC_Power_SF        -> production_kw
2. M_Exported, M_Imported + M_Energy_W_SF   -> exported_kwh, imported_kwh
3. Meter AC power + M_AC_Power_SF           -> net_import_kw
4. production_kw + net_import_kw            -> consumption_kw

Any read or decode failure propagates immediately, so a caller either gets
a complete snapshot or an exception.  There are no retries here; see
:mod:`chargehq_edge.src.retry`.

CHANGELOG:
- 2026-10-19: Read groups in TELEMETRY_GROUPS order
- 2026-10-19: Make meter polarity configurable (meter_export_positive)
- 2026-10-19: Initial creation

TODO:
- Verify M_AC_Power polarity against a consumption-point meter install.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chargehq_edge.src.models import SiteMeters
from chargehq_edge.src.reader import read_scaled_group
from chargehq_edge.src.registers import TELEMETRY_GROUPS
from chargehq_edge.src.scaling import to_kilo

if TYPE_CHECKING:
    from pymodbus.client import AsyncModbusTcpClient

logger = logging.getLogger(__name__)


def build_site_meters(
    *,
    ac_power_w: float,
    meter_power_w: float,
    exported_wh: float,
    imported_wh: float,
    meter_export_positive: bool = True,
) -> SiteMeters:
    """Combine scaled readings into a SiteMeters snapshot.

    This is a **pure function**: no I/O, no side effects.

    Args:
        ac_power_w: Inverter AC output in watts (already scaled).
        meter_power_w: Meter real power in watts (already scaled), in the
            meter's own sign convention.
        exported_wh: Lifetime exported energy in Wh (already scaled).
        imported_wh: Lifetime imported energy in Wh (already scaled).
        meter_export_positive: ``True`` when the meter reports export as
            positive (SolarEdge export-point meter).  The reading is then
            negated so that ``net_import_kw`` is positive when importing.

    Returns:
        The immutable snapshot.
    """
    production_kw = to_kilo(ac_power_w)
    meter_kw = to_kilo(meter_power_w)
    net_import_kw = -meter_kw if meter_export_positive else meter_kw

    return SiteMeters(
        consumption_kw=production_kw + net_import_kw,
        net_import_kw=net_import_kw,
        production_kw=production_kw,
        exported_kwh=to_kilo(exported_wh),
        imported_kwh=to_kilo(imported_wh),
    )


async def read_site_meters(
    client: AsyncModbusTcpClient,
    *,
    slave_id: int,
    meter_export_positive: bool = True,
) -> SiteMeters:
    """Read every telemetry register for one cycle and build the snapshot.

    Args:
        client: A connected AsyncModbusTcpClient.
        slave_id: Modbus slave / unit ID.
        meter_export_positive: Meter polarity, see :func:`build_site_meters`.

    Raises:
        TransportError: A request failed.
        DecodeError: A response did not fit its register's type.
    """
    scaled = {
        group.group_name: await read_scaled_group(client, group, slave_id=slave_id)
        for group in TELEMETRY_GROUPS
    }
    (ac_power_w,) = scaled["ac_power"]
    exported_wh, imported_wh = scaled["energy"]
    (meter_power_w,) = scaled["meter_power"]

    meters = build_site_meters(
        ac_power_w=ac_power_w,
        meter_power_w=meter_power_w,
        exported_wh=exported_wh,
        imported_wh=imported_wh,
        meter_export_positive=meter_export_positive,
    )
    logger.debug("Site meters: %s", meters)
    return meters
