"""
Edge daemon main loop for the SolarEdge-to-ChargeHQ telemetry pipeline.

Runs one fixed-interval asyncio loop.  Every tick:

1. Connects to the inverter with a fresh AsyncModbusTcpClient.
2. Reads the SunSpec telemetry registers into a SiteMeters snapshot.
3. Wraps it in a ChargeHqPayload and hands it to the publisher.

The whole cycle is retried by the RetryPolicy (jittered Fibonacci backoff).
When every attempt fails the tick is skipped and logged; the loop always
sleeps and moves on to the next tick.  Graceful shutdown on SIGTERM/SIGINT
sets a shared asyncio.Event, letting the current tick finish first.

Structured JSON logging is used for all events.  An optional HealthWriter
records the outcome of each tick.

CHANGELOG:
- 2026-10-19: Retry publisher failures along with read failures
- 2026-10-19: Log inverter identification once at startup
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import json
import logging
import signal
import sys
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from chargehq_edge.src.aggregator import read_site_meters
from chargehq_edge.src.errors import (
    ReadError,
    RetriesExhaustedError,
    TransportError,
    error_kind,
)
from chargehq_edge.src.models import ChargeHqPayload, SiteMeters
from chargehq_edge.src.reader import read_device_info
from chargehq_edge.src.retry import RetryPolicy
from pymodbus.client import AsyncModbusTcpClient
from pymodbus.exceptions import ModbusException

if TYPE_CHECKING:
    from chargehq_edge.src.health import HealthWriter

logger = logging.getLogger(__name__)

Publisher = Callable[[ChargeHqPayload], Awaitable[None]]
"""Receives each successful payload; transmission is up to the publisher."""


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging() -> None:
    """Configure structured JSON logging for the edge daemon.

    Sets up the root logger with a JSON-formatted handler writing to stderr.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO)
    logging.getLogger("pymodbus").setLevel(logging.CRITICAL)


def _masked_token(value: str | None) -> str:
    """Return a short non-reversible token fingerprint for diagnostics."""
    if not value:
        return "empty"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"len={len(value)} sha256={digest}"


# ---------------------------------------------------------------------------
# Startup logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup, excluding secrets.

    The ChargeHQ API key is only logged as a masked fingerprint.

    Args:
        settings: An EdgeSettings instance (or any object with the same attrs).
    """
    logger.info(
        "Edge daemon starting with config: "
        "solaredge_host=%s, solaredge_port=%s, solaredge_slave_id=%s, "
        "poll_interval_s=%s, modbus_timeout_s=%s, "
        "retry_base_delay_ms=%s, retry_max_attempts=%s, "
        "meter_export_positive=%s, health_path=%s, api_key_masked=%s",
        settings.solaredge_host,  # type: ignore[attr-defined]
        settings.solaredge_port,  # type: ignore[attr-defined]
        settings.solaredge_slave_id,  # type: ignore[attr-defined]
        settings.poll_interval_s,  # type: ignore[attr-defined]
        settings.modbus_timeout_s,  # type: ignore[attr-defined]
        settings.retry_base_delay_ms,  # type: ignore[attr-defined]
        settings.retry_max_attempts,  # type: ignore[attr-defined]
        settings.meter_export_positive,  # type: ignore[attr-defined]
        settings.health_path or "disabled",  # type: ignore[attr-defined]
        _masked_token(settings.chargehq_api_key),  # type: ignore[attr-defined]
    )


async def log_payload(payload: ChargeHqPayload) -> None:
    """Default publisher: log the payload with the API key masked."""
    logger.info(
        "ChargeHQ payload ready: apiKey=%s siteMeters=%s",
        _masked_token(payload.api_key),
        payload.site_meters.model_dump_json(),
    )


# ---------------------------------------------------------------------------
# Modbus session
# ---------------------------------------------------------------------------


async def _connect(settings: object) -> AsyncModbusTcpClient:
    """Create and connect a client, raising TransportError on failure."""
    host = settings.solaredge_host  # type: ignore[attr-defined]
    port = settings.solaredge_port  # type: ignore[attr-defined]
    client = AsyncModbusTcpClient(
        host,
        port=port,
        timeout=settings.modbus_timeout_s,  # type: ignore[attr-defined]
    )
    try:
        ok = await client.connect()
    except (ModbusException, OSError) as exc:
        client.close()
        raise TransportError(f"Failed to connect to {host}:{port}: {exc}") from exc
    if not ok:
        client.close()
        raise TransportError(f"Failed to connect to {host}:{port}")
    return client


async def log_device_info(settings: object) -> None:
    """Read and log the inverter identification strings once.

    Failures are logged and otherwise ignored; identification is not needed
    for telemetry.
    """
    try:
        client = await _connect(settings)
        try:
            info = await read_device_info(
                client,
                slave_id=settings.solaredge_slave_id,  # type: ignore[attr-defined]
            )
        finally:
            client.close()
    except ReadError as exc:
        logger.warning("Could not read inverter identification (%s): %s", exc.kind, exc)
        return

    logger.info(
        "Connected to %s %s (firmware %s, serial %s)",
        info.manufacturer,
        info.model,
        info.version,
        info.serial_number,
    )


# ---------------------------------------------------------------------------
# Single-iteration functions (easily testable)
# ---------------------------------------------------------------------------


async def run_cycle(settings: object, *, publish: Publisher) -> SiteMeters:
    """Execute one connect-read-publish cycle.

    The Modbus client is closed before publishing, whether or not the reads
    succeeded.

    Args:
        settings: An EdgeSettings instance (or any object with the same attrs).
        publish: Coroutine function receiving the payload.

    Returns:
        The snapshot that was published.

    Raises:
        TransportError: Connecting or reading failed.
        DecodeError: A register response could not be decoded.
        Exception: Anything raised by *publish* propagates unchanged.
    """
    export_positive = settings.meter_export_positive  # type: ignore[attr-defined]
    client = await _connect(settings)
    try:
        meters = await read_site_meters(
            client,
            slave_id=settings.solaredge_slave_id,  # type: ignore[attr-defined]
            meter_export_positive=export_positive,
        )
    finally:
        client.close()

    payload = ChargeHqPayload(
        api_key=settings.chargehq_api_key,  # type: ignore[attr-defined]
        site_meters=meters,
    )
    await publish(payload)
    return meters


async def _tick(
    *,
    settings: object,
    policy: RetryPolicy,
    publish: Publisher,
    health: HealthWriter | None,
) -> bool:
    """Run one retried cycle, never raising.

    Args:
        settings: An EdgeSettings instance (or any object with the same attrs).
        policy: Retry policy wrapping the cycle.
        publish: Coroutine function receiving the payload.
        health: HealthWriter instance, or None to skip health writes.

    Returns:
        True if a snapshot was produced and published, False otherwise.
    """
    ok = False
    try:
        meters = await policy.run(lambda: run_cycle(settings, publish=publish))
    except RetriesExhaustedError as exc:
        logger.error(
            "Tick skipped after %d attempt(s), last %s error: %s",
            exc.attempts,
            error_kind(exc.last_error),
            exc.last_error,
        )
    else:
        ok = True
        logger.info(
            "Tick success: production_kw=%.3f net_import_kw=%.3f consumption_kw=%.3f",
            meters.production_kw,
            meters.net_import_kw,
            meters.consumption_kw,
        )

    if health is not None:
        try:
            if ok:
                health.record_success()
            else:
                health.record_failure()
        except OSError:
            logger.warning("Failed to write health file", exc_info=True)

    return ok


# ---------------------------------------------------------------------------
# Loop runner
# ---------------------------------------------------------------------------


async def run_loop(
    *,
    settings: object,
    policy: RetryPolicy,
    publish: Publisher,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None = None,
) -> None:
    """Run ticks every poll_interval_s until shutdown_event is set.

    The next tick is scheduled regardless of the previous tick's outcome.

    Args:
        settings: An EdgeSettings instance (or any object with the same attrs).
        policy: Retry policy wrapping each cycle.
        publish: Coroutine function receiving each payload.
        shutdown_event: Event to signal graceful shutdown.
        health: HealthWriter instance, or None to skip health writes.
    """
    interval = settings.poll_interval_s  # type: ignore[attr-defined]
    logger.info("Poll loop started (interval=%ss)", interval)
    while not shutdown_event.is_set():
        await _tick(settings=settings, policy=policy, publish=publish, health=health)
        # Use wait with timeout so we can check shutdown between sleeps
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
    logger.info("Poll loop stopped")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main() -> None:
    """Async entrypoint: load config, build components, run the loop.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    configure_logging()

    from chargehq_edge.src.config import EdgeSettings
    from chargehq_edge.src.health import HealthWriter

    settings = EdgeSettings()
    log_config_summary(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    policy = RetryPolicy(
        base_delay_s=settings.retry_base_delay_ms / 1000.0,
        max_attempts=settings.retry_max_attempts,
    )
    health = HealthWriter(settings.health_path) if settings.health_path else None

    await log_device_info(settings)
    await run_loop(
        settings=settings,
        policy=policy,
        publish=log_payload,
        shutdown_event=shutdown_event,
        health=health,
    )


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the edge daemon."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
