"""
Edge daemon package for the SolarEdge-to-ChargeHQ pipeline.

Reads inverter and meter telemetry from a SolarEdge inverter over Modbus TCP
(SunSpec register model), derives site power and energy figures, and hands
one snapshot per tick to the ChargeHQ push payload.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""
