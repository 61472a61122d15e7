"""
Typed Modbus holding-register reads on top of an async pymodbus client.

Each call issues exactly one ``read_holding_registers`` request and decodes
the returned words with the decoder for the register's kind.  There is no
caching and no batching across registers: a SunSpec scale factor is always
its own request.

Failures are raised, never returned:

- :class:`~chargehq_edge.src.errors.TransportError` when the request itself
  fails (exception from the client, or a Modbus error response).
- :class:`~chargehq_edge.src.errors.DecodeError` when the response is short
  or the words do not fit the register's kind.

CHANGELOG:
- 2026-10-19: Read identification strings from DEVICE_REGISTERS
- 2026-10-19: Add read_device_info for the startup identification read
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chargehq_edge.src.codec import decode
from chargehq_edge.src.errors import DecodeError, TransportError
from chargehq_edge.src.models import DeviceInfo
from chargehq_edge.src.registers import DEVICE_REGISTERS
from chargehq_edge.src.scaling import scale
from pymodbus.exceptions import ModbusException

if TYPE_CHECKING:
    from chargehq_edge.src.registers import RegisterDef, ScaledGroup
    from pymodbus.client import AsyncModbusTcpClient

logger = logging.getLogger(__name__)


async def read_register(
    client: AsyncModbusTcpClient,
    reg: RegisterDef,
    *,
    slave_id: int,
) -> int | str:
    """Read one register span and decode it to the register's kind.

    Args:
        client: A connected AsyncModbusTcpClient (or any object with the
            same async ``read_holding_registers`` signature).
        reg: The register to read.
        slave_id: Modbus slave / unit ID passed as ``device_id``.

    Returns:
        ``int`` for INT16/UINT32 registers, ``str`` for STRING registers.

    Raises:
        TransportError: The request failed or returned a Modbus error.
        DecodeError: The response words do not fit the register's kind.
    """
    logger.debug(
        "Reading %s (address=%d, count=%d)", reg.name, reg.address, reg.word_count
    )
    try:
        response = await client.read_holding_registers(
            reg.address,
            count=reg.word_count,
            device_id=slave_id,
        )
    except (ModbusException, OSError) as exc:
        raise TransportError(
            f"Modbus request failed: {exc}",
            register=reg.name,
            address=reg.address,
        ) from exc

    if response.isError():
        raise TransportError(
            f"Modbus error response: {response}",
            register=reg.name,
            address=reg.address,
        )

    words = list(response.registers)
    if len(words) < reg.word_count:
        raise DecodeError(
            f"Expected {reg.word_count} word(s), got {len(words)}",
            register=reg.name,
            address=reg.address,
        )

    try:
        return decode(reg.kind, words[: reg.word_count])
    except DecodeError as exc:
        raise DecodeError(str(exc), register=reg.name, address=reg.address) from exc


async def read_scaled_group(
    client: AsyncModbusTcpClient,
    group: ScaledGroup,
    *,
    slave_id: int,
) -> tuple[float, ...]:
    """Read a group's value registers, then its scale factor, and scale them.

    The value registers are read in declaration order, immediately followed
    by the scale-factor register.

    Returns:
        One scaled float per value register, in declaration order.
    """
    raws = [
        await read_register(client, reg, slave_id=slave_id) for reg in group.values
    ]
    exponent = await read_register(client, group.scale_factor, slave_id=slave_id)
    scaled = tuple(scale(raw, exponent) for raw in raws)  # type: ignore[arg-type]
    logger.debug(
        "Group '%s': raw=%s sf=%s scaled=%s", group.group_name, raws, exponent, scaled
    )
    return scaled


async def read_device_info(
    client: AsyncModbusTcpClient,
    *,
    slave_id: int,
) -> DeviceInfo:
    """Read the SunSpec common-block identification strings."""
    values: dict[str, str] = {}
    # DEVICE_REGISTERS follows DeviceInfo field order
    for field_name, reg in zip(DeviceInfo.model_fields, DEVICE_REGISTERS, strict=True):
        value = await read_register(client, reg, slave_id=slave_id)
        values[field_name] = str(value).strip()
    return DeviceInfo(**values)
