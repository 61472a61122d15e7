"""
SolarEdge SunSpec Modbus TCP register map -- single source of truth.

Defines the holding registers read from a SolarEdge inverter and its export
meter, their data types and word widths, and how value registers pair up
with the scale-factor register that converts them to engineering units.

All addresses are 0-based Modbus offsets (the SolarEdge documentation lists
them 1-based, e.g. I_AC_Power is documented as 40084).

References:
    - SolarEdge "Modbus TCP Protocol for SolarEdge Inverters" (SunSpec models
      101-103 inverter, 201-204 meter)

CHANGELOG:
- 2026-10-19: Add common-block identification registers (C_Manufacturer etc.)
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Data definitions
# ---------------------------------------------------------------------------


class RegisterKind(Enum):
    """Closed set of value types a register can decode to.

    The enum value is the fixed word width of the type, or ``None`` for
    variable-width packed-ASCII strings.
    """

    INT16 = 1
    UINT32 = 2
    STRING = None

    @property
    def width(self) -> int | None:
        """Words occupied by this kind, ``None`` when declared per register."""
        return self.value


@dataclass(frozen=True, slots=True)
class RegisterDef:
    """Definition of a single Modbus holding register span.

    Attributes:
        address: Modbus holding register start address (0-based).
        name: Unique human-readable identifier (SunSpec point name).
        kind: Value type the raw words decode to.
        description: Free-text description of the register.
        word_count: Number of 16-bit Modbus words this register occupies.
            Derived from *kind* when not set explicitly.  STRING registers
            must set this explicitly.
    """

    address: int
    name: str
    kind: RegisterKind
    description: str = ""
    word_count: int = field(default=0, repr=False)

    def __post_init__(self) -> None:  # noqa: D105
        if not 0 <= self.address <= 0xFFFF:
            msg = f"Register '{self.name}': address {self.address} out of range"
            raise ValueError(msg)

        width = self.kind.width
        if self.word_count == 0:
            if width is None:
                msg = (
                    f"Register '{self.name}': word_count must be set "
                    f"explicitly for kind '{self.kind.name}'"
                )
                raise ValueError(msg)
            # frozen=True requires object.__setattr__
            object.__setattr__(self, "word_count", width)
        elif width is not None and self.word_count != width:
            msg = (
                f"Register '{self.name}': kind '{self.kind.name}' occupies "
                f"{width} word(s), got word_count={self.word_count}"
            )
            raise ValueError(msg)
        elif not 0 < self.word_count <= 0xFFFF:
            msg = f"Register '{self.name}': invalid word_count {self.word_count}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ScaledGroup:
    """Value registers read together with the scale factor they share.

    The reader always reads every value register in order and then the
    scale-factor register, on the same session, with nothing in between.

    Attributes:
        group_name: Human-readable group identifier (e.g. ``"ac_power"``).
        values: Ordered value registers scaled by *scale_factor*.
        scale_factor: Signed 16-bit power-of-ten exponent register.
    """

    group_name: str
    values: tuple[RegisterDef, ...]
    scale_factor: RegisterDef

    def __post_init__(self) -> None:  # noqa: D105
        if not self.values:
            msg = f"Group '{self.group_name}': at least one value register required"
            raise ValueError(msg)
        if self.scale_factor.kind is not RegisterKind.INT16:
            raise ValueError(
                f"Group '{self.group_name}': scale factor "
                f"'{self.scale_factor.name}' must be INT16"
            )
        for reg in self.values:
            if reg.kind is RegisterKind.STRING:
                raise ValueError(
                    f"Group '{self.group_name}': value register '{reg.name}' "
                    "must be numeric"
                )


# ---------------------------------------------------------------------------
# Inverter model (101-103): AC power
# ---------------------------------------------------------------------------

I_AC_POWER = RegisterDef(
    address=40083,
    name="I_AC_Power",
    kind=RegisterKind.INT16,
    description="Inverter AC output power (W, scaled by I_AC_Power_SF)",
)

I_AC_POWER_SF = RegisterDef(
    address=40084,
    name="I_AC_Power_SF",
    kind=RegisterKind.INT16,
    description="AC power scale factor",
)

AC_POWER_GROUP = ScaledGroup(
    group_name="ac_power",
    values=(I_AC_POWER,),
    scale_factor=I_AC_POWER_SF,
)

# ---------------------------------------------------------------------------
# Meter model (201-204): AC power and energy counters
# ---------------------------------------------------------------------------

M_AC_POWER = RegisterDef(
    address=40206,
    name="M_AC_Power",
    kind=RegisterKind.INT16,
    description=(
        "Meter total real power (W, scaled by M_AC_Power_SF). "
        "Positive = exporting to grid on an export-point meter."
    ),
)

M_AC_POWER_SF = RegisterDef(
    address=40210,
    name="M_AC_Power_SF",
    kind=RegisterKind.INT16,
    description="Meter real power scale factor",
)

METER_POWER_GROUP = ScaledGroup(
    group_name="meter_power",
    values=(M_AC_POWER,),
    scale_factor=M_AC_POWER_SF,
)

M_EXPORTED = RegisterDef(
    address=40226,
    name="M_Exported",
    kind=RegisterKind.UINT32,
    description="Total exported real energy (Wh, scaled by M_Energy_W_SF)",
)

M_IMPORTED = RegisterDef(
    address=40234,
    name="M_Imported",
    kind=RegisterKind.UINT32,
    description="Total imported real energy (Wh, scaled by M_Energy_W_SF)",
)

M_ENERGY_W_SF = RegisterDef(
    address=40242,
    name="M_Energy_W_SF",
    kind=RegisterKind.INT16,
    description="Real energy scale factor shared by M_Exported and M_Imported",
)

ENERGY_GROUP = ScaledGroup(
    group_name="energy",
    values=(M_EXPORTED, M_IMPORTED),
    scale_factor=M_ENERGY_W_SF,
)

# ---------------------------------------------------------------------------
# Common block (model 1): device identification
# Read once at startup to identify the inverter.
# ---------------------------------------------------------------------------

C_MANUFACTURER = RegisterDef(
    address=40004,
    name="C_Manufacturer",
    kind=RegisterKind.STRING,
    description="Manufacturer name (32 ASCII chars in 16 words)",
    word_count=16,
)

C_MODEL = RegisterDef(
    address=40020,
    name="C_Model",
    kind=RegisterKind.STRING,
    description="Inverter model (32 ASCII chars in 16 words)",
    word_count=16,
)

C_VERSION = RegisterDef(
    address=40044,
    name="C_Version",
    kind=RegisterKind.STRING,
    description="CPU firmware version (16 ASCII chars in 8 words)",
    word_count=8,
)

C_SERIAL_NUMBER = RegisterDef(
    address=40052,
    name="C_SerialNumber",
    kind=RegisterKind.STRING,
    description="Inverter serial number (32 ASCII chars in 16 words)",
    word_count=16,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

TELEMETRY_GROUPS: tuple[ScaledGroup, ...] = (
    AC_POWER_GROUP,
    ENERGY_GROUP,
    METER_POWER_GROUP,
)
"""Scaled groups in per-tick read order."""

DEVICE_REGISTERS: tuple[RegisterDef, ...] = (
    C_MANUFACTURER,
    C_MODEL,
    C_VERSION,
    C_SERIAL_NUMBER,
)
"""Identification registers in startup read order, matching DeviceInfo fields."""
