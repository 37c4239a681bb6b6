#!/usr/bin/env python3
"""
Daemon Management Module

Runs reconciliation cycles on a fixed interval with signal handling and
graceful shutdown. The stop event doubles as the cancellation signal of the
running cycle.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import signal
import threading
import time
from typing import Any, Dict

################################################################################
# DAEMON MANAGER CLASS - Background Process Management
################################################################################

class DaemonManager:
    """Daemon manager for interval-driven cycles with signal handling and graceful shutdown."""

    def __init__(self, application: Any, logger: Any, cycle_interval: float = 300,
                 install_signal_handlers: bool = True) -> None:
        """Initialize daemon manager."""
        self.application = application
        self.logger = logger
        self.cycle_interval = cycle_interval

        self.running = False
        self._stop_event = threading.Event()

        if install_signal_handlers:
            self._setup_signal_handlers()
        self.logger.debug("Daemon manager initialized")

    ################################################################################
    # PUBLIC INTERFACE - Daemon Lifecycle Management
    ################################################################################

    def run_forever(self) -> None:
        """Run cycles in the foreground until stop() is called (blocking call)."""
        self.logger.debug("Starting daemon in foreground mode...")

        try:
            self.running = True
            self._stop_event.clear()
            self._daemon_loop()
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt, stopping...")
            self.stop()
        finally:
            self.running = False
            self._cleanup()

    def stop(self) -> None:
        """Request shutdown; the running cycle is cancelled."""
        self.logger.info("Stopping daemon...")
        self._stop_event.set()

    def is_running(self) -> bool:
        """Check if daemon is currently running."""
        return self.running and not self._stop_event.is_set()

    def get_status(self) -> Dict[str, Any]:
        """Get current daemon status information."""
        return {
            'running': self.running,
            'stop_requested': self._stop_event.is_set(),
            'cycle_interval': self.cycle_interval,
        }

    ################################################################################
    # PRIVATE METHODS - Internal Implementation
    ################################################################################

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum: int, frame: Any) -> None:
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            self.stop()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def _daemon_loop(self) -> None:
        """Run one cycle per interval; a cycle never starts before the previous one returned."""
        self.logger.debug(f"Daemon loop started (interval: {self.cycle_interval}s)")

        while not self._stop_event.is_set():
            cycle_start_time = time.monotonic()

            try:
                if not self.application.run_cycle(self._stop_event):
                    self.logger.warning("Application cycle returned failure")
            except Exception as e:
                self.logger.error(f"Error in daemon loop: {e}", exc_info=True)

            cycle_duration = time.monotonic() - cycle_start_time
            sleep_time = max(0, self.cycle_interval - cycle_duration)

            if sleep_time > 0:
                self.logger.debug(f"Cycle completed in {cycle_duration:.2f}s, sleeping for {sleep_time:.2f}s")
                if self._stop_event.wait(timeout=sleep_time):
                    break
            else:
                self.logger.warning(f"Cycle took {cycle_duration:.2f}s, longer than interval {self.cycle_interval}s")

        self.logger.debug("Daemon loop finished")

    def _cleanup(self) -> None:
        try:
            self.application.cleanup()
        except Exception as e:
            self.logger.warning(f"Application cleanup failed: {e}")
