"""Exclusive hold on the host's interactive flag during table mutations."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

from excel_data.db.host import Host
from excel_data.errors import InteractionTimeoutError
from excel_data.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _acquire(host: Host, settings: Settings) -> None:
    deadline = time.monotonic() + settings.interaction_timeout_seconds
    delay = settings.interaction_backoff_initial_seconds
    attempts = 0
    while True:
        attempts += 1
        try:
            host.set_interactive(False)
            if not host.get_interactive():
                logger.debug("Host is non-interactive after %d attempt(s)", attempts)
                return
        except Exception as exc:  # noqa: BLE001 - the host rejects mode changes while busy
            logger.debug("Host refused non-interactive mode (attempt %d): %s", attempts, exc)
        if time.monotonic() + delay > deadline:
            raise InteractionTimeoutError(
                f"Host stayed interactive for {settings.interaction_timeout_seconds}s "
                f"({attempts} attempts)"
            )
        time.sleep(delay)
        delay = min(
            settings.interaction_backoff_max_seconds,
            delay * settings.interaction_backoff_multiplier,
        )


@contextmanager
def suppressed_interaction(host: Host, settings: Settings | None = None) -> Iterator[None]:
    """Hold the host in non-interactive mode for the body of the ``with`` block.

    Switching is retried with exponential backoff until
    ``interaction_timeout_seconds`` expires. Interactive mode is switched back
    on when the block exits, whether it returns or raises. If the block raised,
    a failure to switch back is logged and the block's exception propagates.

    Raises
    ------
    InteractionTimeoutError
        If the host could not be made non-interactive in time.
    """
    settings = settings or get_settings()
    try:
        _acquire(host, settings)
        yield
    except BaseException:
        try:
            host.set_interactive(True)
        except Exception:
            logger.exception("Could not switch the host back to interactive mode")
        raise
    host.set_interactive(True)
