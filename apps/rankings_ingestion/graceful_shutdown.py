"""
Graceful shutdown handling for long-running rankings jobs.

SIGTERM (container stop) or SIGINT (Ctrl+C) sets a flag instead of killing
the process. The migrator checks it between pages and the HTTP server polls
it, so in-flight work finishes and the resume point is reported.
"""

from __future__ import annotations

import logging
import signal

from typing import Optional

logger = logging.getLogger(__name__)


class GracefulShutdown:
    """
    Shutdown flag shared by every loop in the process.

    Usage:
        handler = setup_graceful_shutdown()
        while work_remaining:
            if handler.should_shutdown:
                break
            process_next_page()
    """

    def __init__(self) -> None:
        self._shutdown_requested = False

    @property
    def should_shutdown(self) -> bool:
        return self._shutdown_requested

    def request_shutdown(self) -> None:
        if self._shutdown_requested:
            return
        self._shutdown_requested = True
        logger.warning("Shutdown requested, finishing current page before exit")

    def reset(self) -> None:
        self._shutdown_requested = False

    def _signal_handler(self, signum: int, frame) -> None:
        logger.info(f"Received {signal.Signals(signum).name} signal")
        self.request_shutdown()

    def setup_signal_handlers(self) -> None:
        """Route SIGTERM and SIGINT (and SIGBREAK on Windows) to request_shutdown."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)
        if hasattr(signal, 'SIGBREAK'):
            signal.signal(signal.SIGBREAK, self._signal_handler)
        logger.info("Graceful shutdown handlers registered (SIGTERM, SIGINT)")


_shutdown_handler: Optional[GracefulShutdown] = None


def get_shutdown_handler() -> GracefulShutdown:
    global _shutdown_handler
    if _shutdown_handler is None:
        _shutdown_handler = GracefulShutdown()
    return _shutdown_handler


def setup_graceful_shutdown() -> GracefulShutdown:
    handler = get_shutdown_handler()
    handler.setup_signal_handlers()
    return handler


def should_shutdown() -> bool:
    return get_shutdown_handler().should_shutdown
