"""
Tests for typed holding-register reads.

Verifies that each read issues exactly one request with the register's
address and word count, decodes by kind, and turns client failures into
TransportError / DecodeError.  Tests use a mocked AsyncModbusTcpClient.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from chargehq_edge.src.errors import DecodeError, TransportError
from chargehq_edge.src.reader import read_device_info, read_register, read_scaled_group
from chargehq_edge.src.registers import (
    AC_POWER_GROUP,
    C_MANUFACTURER,
    C_MODEL,
    C_SERIAL_NUMBER,
    C_VERSION,
    DEVICE_REGISTERS,
    ENERGY_GROUP,
    I_AC_POWER,
    M_EXPORTED,
)
from pymodbus.exceptions import ConnectionException, ModbusIOException

# ---------------------------------------------------------------------------
# Helpers: build a mock pymodbus client
# ---------------------------------------------------------------------------


def _make_response(registers: list[int], is_error: bool = False) -> MagicMock:
    """Create a mock pymodbus response PDU."""
    resp = MagicMock()
    resp.isError.return_value = is_error
    resp.registers = registers
    return resp


def _make_mock_client(
    values: dict[int, list[int]],
    error_addresses: set[int] | None = None,
) -> AsyncMock:
    """Create a mocked client answering read_holding_registers by address.

    Args:
        values: Start address -> words returned for a read at that address.
        error_addresses: Addresses whose reads return a Modbus error response.
    """
    error_addresses = error_addresses or set()

    async def _read_holding_registers(
        address: int, *, count: int = 1, device_id: int = 1
    ) -> MagicMock:
        if address in error_addresses or address not in values:
            return _make_response([], is_error=True)
        return _make_response(values[address])

    client = AsyncMock()
    client.read_holding_registers = AsyncMock(side_effect=_read_holding_registers)
    return client


def _string_words(text: str, word_count: int) -> list[int]:
    """Pack ASCII text into null-padded big-endian words."""
    data = text.encode("ascii").ljust(word_count * 2, b"\x00")
    return [int.from_bytes(data[i : i + 2], "big") for i in range(0, len(data), 2)]


# ===========================================================================
# read_register
# ===========================================================================


class TestReadRegister:
    """read_register issues one request and decodes by kind."""

    @pytest.mark.asyncio
    async def test_reads_address_count_and_device_id(self) -> None:
        client = _make_mock_client({40226: [0, 5000]})

        await read_register(client, M_EXPORTED, slave_id=3)

        client.read_holding_registers.assert_awaited_once_with(
            40226, count=2, device_id=3
        )

    @pytest.mark.asyncio
    async def test_decodes_int16(self) -> None:
        client = _make_mock_client({40083: [0xFFFF]})
        assert await read_register(client, I_AC_POWER, slave_id=1) == -1

    @pytest.mark.asyncio
    async def test_decodes_uint32(self) -> None:
        client = _make_mock_client({40226: [0x0001, 0x0000]})
        assert await read_register(client, M_EXPORTED, slave_id=1) == 65536

    @pytest.mark.asyncio
    async def test_error_response_raises_transport_error(self) -> None:
        client = _make_mock_client({}, error_addresses={40083})

        with pytest.raises(TransportError) as exc_info:
            await read_register(client, I_AC_POWER, slave_id=1)

        assert exc_info.value.register == "I_AC_Power"
        assert exc_info.value.address == 40083
        assert exc_info.value.kind == "transport"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ModbusIOException("no response"),
            ConnectionException("reset"),
            TimeoutError("timed out"),
            OSError("connection refused"),
        ],
    )
    async def test_client_exception_raises_transport_error(
        self, error: Exception
    ) -> None:
        client = AsyncMock()
        client.read_holding_registers = AsyncMock(side_effect=error)

        with pytest.raises(TransportError) as exc_info:
            await read_register(client, I_AC_POWER, slave_id=1)

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_short_response_raises_decode_error(self) -> None:
        client = _make_mock_client({40226: [0x0001]})

        with pytest.raises(DecodeError) as exc_info:
            await read_register(client, M_EXPORTED, slave_id=1)

        assert exc_info.value.kind == "decode"
        assert "M_Exported" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises_decode_error_with_register(self) -> None:
        client = _make_mock_client({40004: [0xC328] + [0] * 15})

        with pytest.raises(DecodeError) as exc_info:
            await read_register(client, C_MANUFACTURER, slave_id=1)

        assert exc_info.value.register == "C_Manufacturer"

    @pytest.mark.asyncio
    async def test_logs_read_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        client = _make_mock_client({40083: [10]})

        with caplog.at_level(logging.DEBUG, logger="chargehq_edge.src.reader"):
            await read_register(client, I_AC_POWER, slave_id=1)

        assert "I_AC_Power" in caplog.text
        assert "40083" in caplog.text


# ===========================================================================
# read_scaled_group
# ===========================================================================


class TestReadScaledGroup:
    """Value registers are read first, then the scale factor, then scaled."""

    @pytest.mark.asyncio
    async def test_values_then_scale_factor(self) -> None:
        client = _make_mock_client({40226: [0, 5000], 40234: [0, 3000], 40242: [0]})

        await read_scaled_group(client, ENERGY_GROUP, slave_id=1)

        addresses = [c.args[0] for c in client.read_holding_registers.call_args_list]
        assert addresses == [40226, 40234, 40242]

    @pytest.mark.asyncio
    async def test_applies_scale_factor(self) -> None:
        # 2000 * 10^-1 = 200.0 W
        client = _make_mock_client({40083: [2000], 40084: [0xFFFF]})

        result = await read_scaled_group(client, AC_POWER_GROUP, slave_id=1)

        assert result == (200.0,)

    @pytest.mark.asyncio
    async def test_shared_scale_factor_applies_to_all_values(self) -> None:
        client = _make_mock_client({40226: [0, 5], 40234: [0, 3], 40242: [3]})

        result = await read_scaled_group(client, ENERGY_GROUP, slave_id=1)

        assert result == (5000.0, 3000.0)

    @pytest.mark.asyncio
    async def test_scale_factor_failure_propagates(self) -> None:
        client = _make_mock_client({40083: [2000]}, error_addresses={40084})

        with pytest.raises(TransportError) as exc_info:
            await read_scaled_group(client, AC_POWER_GROUP, slave_id=1)

        assert exc_info.value.register == "I_AC_Power_SF"

    @pytest.mark.asyncio
    async def test_value_failure_skips_scale_factor_read(self) -> None:
        client = _make_mock_client({40084: [0]}, error_addresses={40083})

        with pytest.raises(TransportError):
            await read_scaled_group(client, AC_POWER_GROUP, slave_id=1)

        assert client.read_holding_registers.await_count == 1


# ===========================================================================
# read_device_info
# ===========================================================================


class TestReadDeviceInfo:
    """Common-block strings are decoded and trimmed."""

    @pytest.mark.asyncio
    async def test_reads_identification(self) -> None:
        client = _make_mock_client(
            {
                C_MANUFACTURER.address: _string_words("SolarEdge ", 16),
                C_MODEL.address: _string_words("SE5000H-RW000BNN4", 16),
                C_VERSION.address: _string_words("0004.0019.0036", 8),
                C_SERIAL_NUMBER.address: _string_words("7E0A1B2C", 16),
            }
        )

        info = await read_device_info(client, slave_id=1)

        assert info.manufacturer == "SolarEdge"
        assert info.model == "SE5000H-RW000BNN4"
        assert info.version == "0004.0019.0036"
        assert info.serial_number == "7E0A1B2C"

        addresses = [c.args[0] for c in client.read_holding_registers.call_args_list]
        assert addresses == [reg.address for reg in DEVICE_REGISTERS]

    @pytest.mark.asyncio
    async def test_failure_propagates(self) -> None:
        client = _make_mock_client({})

        with pytest.raises(TransportError):
            await read_device_info(client, slave_id=1)
