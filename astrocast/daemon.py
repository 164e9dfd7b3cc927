"""Weather daemon: drives the refresh scheduler on a fixed tick interval.

Acts as the host for the scheduler: it owns the tick cadence, publishes the
latest status and values to a JSON state file, and tears the scheduler down on
exit.

Usage:
    python -m astrocast daemon --config ops/configs/default.yaml
    python -m astrocast daemon --interval 600   # tick every 10 minutes
    python -m astrocast daemon --stop           # stop running daemon
"""

import json
import logging
import os
import signal
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from astrocast.config.loader import config_hash
from astrocast.config.schema import StationConfig
from astrocast.ingest.astrospheric_client import AstrosphericClient
from astrocast.ingest.staleness import fetch_age_hours
from astrocast.models.forecast import CRITICAL_PARAMETER
from astrocast.models.status import DeviceStatus, TickResult
from astrocast.pipeline.refresh_scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

PID_DIR = Path("data")
PID_FILE = PID_DIR / "astrocast.pid"
STATE_FILE = PID_DIR / "astrocast_state.json"
LOG_DIR = Path("logs")
MAX_LOG_FILES = 100  # Keep last 100 tick logs


def build_scheduler(config: StationConfig) -> RefreshScheduler:
    client = AstrosphericClient(
        base_url=config.provider.base_url,
        endpoint=config.provider.endpoint,
        connect_timeout=config.provider.connect_timeout_seconds,
        read_timeout=config.provider.read_timeout_seconds,
    )
    return RefreshScheduler(config, client)


class WeatherDaemon:
    """Ticks the scheduler in a loop with signal handling and state reporting."""

    def __init__(
        self,
        config: StationConfig,
        interval: int | None = None,
        scheduler: RefreshScheduler | None = None,
    ):
        self.config = config
        self.interval = interval or config.ops.tick_interval_seconds
        self.scheduler = scheduler or build_scheduler(config)
        self._running = False
        self._total_ticks = 0
        self._total_ok = 0
        self._total_alerts = 0
        self._started_at: str | None = None
        self._last_result: TickResult | None = None

    def start(self) -> None:
        """Start the daemon loop."""
        self._check_not_already_running()
        self._write_pid()
        self._setup_signals()
        self._running = True
        self._started_at = datetime.now(UTC).isoformat()

        logger.info(
            "Daemon started — mode=%s interval=%ds pid=%d",
            self.config.mode.value, self.interval, os.getpid(),
        )
        print(f"🔭 Weather daemon started (pid {os.getpid()}, every {self.interval}s)")
        print(f"   Logs: {LOG_DIR}/")
        print("   Stop: python -m astrocast daemon --stop")

        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        finally:
            self._cleanup()

    def _loop(self) -> None:
        """Main tick loop. Failed fetches are retried on the next tick."""
        while self._running:
            tick_start = time.monotonic()
            self._run_one_tick()
            self._save_state()

            # Sleep in 1-second increments so we can respond to signals
            elapsed = time.monotonic() - tick_start
            sleep_until = time.monotonic() + max(0, self.interval - elapsed)
            while self._running and time.monotonic() < sleep_until:
                time.sleep(1)

    def _run_one_tick(self) -> bool:
        """Execute a single tick. Returns True when values were published."""
        self._total_ticks += 1
        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / f"tick_{timestamp}.log"

        # Set up per-tick file handler
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        try:
            result = self.scheduler.tick()
            self._last_result = result
            if result.status == DeviceStatus.OK:
                self._total_ok += 1
                logger.info("Tick #%d OK — %s", self._total_ticks, result.summary)
                return True
            if result.status == DeviceStatus.ALERT:
                self._total_alerts += 1
                logger.error(
                    "Tick #%d alert: %s", self._total_ticks, result.cause
                )
            else:
                logger.info(
                    "Tick #%d status %s", self._total_ticks, result.status.value
                )
            return False
        finally:
            root_logger.removeHandler(file_handler)
            file_handler.close()
            self._rotate_logs()

    def _rotate_logs(self) -> None:
        """Keep only the most recent log files."""
        if not LOG_DIR.exists():
            return
        logs = sorted(LOG_DIR.glob("tick_*.log"))
        if len(logs) > MAX_LOG_FILES:
            for old in logs[: len(logs) - MAX_LOG_FILES]:
                old.unlink(missing_ok=True)

    def _setup_signals(self) -> None:
        """Handle SIGTERM and SIGINT for graceful shutdown."""
        def _stop(signum: int, frame: object) -> None:
            sig_name = signal.Signals(signum).name
            logger.info("Received %s, shutting down gracefully...", sig_name)
            print(f"\n⏹️  Received {sig_name}, finishing current tick...")
            self._running = False

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)

    def _check_not_already_running(self) -> None:
        """Prevent duplicate daemons."""
        if PID_FILE.exists():
            try:
                pid = int(PID_FILE.read_text().strip())
                os.kill(pid, 0)
                print(f"❌ Daemon already running (pid {pid}). Stop it first:")
                print("   python -m astrocast daemon --stop")
                sys.exit(1)
            except (ProcessLookupError, ValueError):
                # Stale PID file, process is dead
                PID_FILE.unlink(missing_ok=True)
            except PermissionError:
                print(f"❌ Daemon may be running (pid {pid}), can't verify.")
                sys.exit(1)

    def _write_pid(self) -> None:
        PID_DIR.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(os.getpid()))

    def _save_state(self) -> None:
        """Persist the latest tick for status reporting."""
        r = self._last_result
        quota = self.scheduler.quota
        last_fetch = self.scheduler.cache.snapshot.last_fetch_at
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "interval": self.interval,
            "mode": self.scheduler.mode.value,
            "config_hash": config_hash(self.config),
            "total_ticks": self._total_ticks,
            "total_ok": self._total_ok,
            "total_alerts": self._total_alerts,
            "status": r.status.value if r else DeviceStatus.IDLE.value,
            "cause": r.cause.value if r and r.cause else None,
            "values": r.values.as_dict() if r and r.values else None,
            "critical_parameter": CRITICAL_PARAMETER,
            "summary": r.summary if r else "",
            "credits_used_today": quota.used_today,
            "credits_near_limit": quota.is_near_limit(),
            "credits_remaining": quota.remaining,
            "forecast_age_hours": (
                round(fetch_age_hours(last_fetch), 2) if last_fetch else None
            ),
            "last_update": datetime.now(UTC).isoformat(),
        }
        PID_DIR.mkdir(parents=True, exist_ok=True)
        STATE_FILE.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        """Close the scheduler and remove the PID file on exit."""
        self.scheduler.close()
        PID_FILE.unlink(missing_ok=True)
        self._save_state()
        logger.info(
            "Daemon stopped — %d ticks (%d ok, %d alerts)",
            self._total_ticks, self._total_ok, self._total_alerts,
        )
        print(
            f"⏹️  Daemon stopped — {self._total_ticks} ticks "
            f"({self._total_ok} ok, {self._total_alerts} alerts)"
        )


def stop_daemon() -> int:
    """Stop a running daemon by sending SIGTERM."""
    if not PID_FILE.exists():
        print("No daemon running (no PID file found)")
        return 1

    try:
        pid = int(PID_FILE.read_text().strip())
    except ValueError:
        print("Corrupt PID file, removing")
        PID_FILE.unlink(missing_ok=True)
        return 1

    try:
        os.kill(pid, 0)  # Check if alive
    except ProcessLookupError:
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        PID_FILE.unlink(missing_ok=True)
        STATE_FILE.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})...")
    os.kill(pid, signal.SIGTERM)

    # Wait up to 60s for graceful shutdown
    for _ in range(60):
        time.sleep(1)
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            print("✅ Daemon stopped")
            PID_FILE.unlink(missing_ok=True)
            return 0

    print("⚠️  Daemon didn't stop in 60s, sending SIGKILL")
    os.kill(pid, signal.SIGKILL)
    PID_FILE.unlink(missing_ok=True)
    return 0


def daemon_status() -> int:
    """Print daemon status from state file."""
    if not STATE_FILE.exists():
        print("No daemon state found")
        return 1

    state = json.loads(STATE_FILE.read_text())
    pid = state.get("pid", "?")

    running = False
    try:
        os.kill(int(pid), 0)
        running = True
    except (ProcessLookupError, ValueError, TypeError):
        pass

    status_icon = "🟢" if running else "🔴"
    print(f"{status_icon} Daemon {'running' if running else 'stopped'}")
    print(f"  PID: {pid}")
    print(f"  Mode: {state.get('mode', 'unknown')}")
    print(f"  Interval: {state.get('interval', '?')}s")
    print(f"  Started: {state.get('started_at', '?')}")
    print(f"  Status: {state.get('status', '?')}")
    if state.get("cause"):
        print(f"  Cause: {state['cause']}")
    if state.get("summary"):
        print(f"  Weather: {state['summary']}")
    print(f"  Total ticks: {state.get('total_ticks', 0)}")
    print(f"  OK: {state.get('total_ok', 0)}")
    print(f"  Alerts: {state.get('total_alerts', 0)}")
    used = state.get("credits_used_today")
    if used is not None:
        near = " (near limit)" if state.get("credits_near_limit") else ""
        print(f"  API credits used today: {used}{near}")
    age = state.get("forecast_age_hours")
    if age is not None:
        print(f"  Forecast age: {age:.1f}h")
    print(f"  Last update: {state.get('last_update', '?')}")
    return 0
