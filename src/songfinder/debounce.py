"""
Per-channel debouncing for live suggestions.

Each keystroke schedules a suggestion fetch for its channel. The fetch only
runs once the channel has been quiet for the configured window; every earlier
pending fetch for that channel is cancelled before its timer fires.

Requests that already started are never cancelled. Instead, every schedule call
bumps a per-channel sequence number and a finished fetch is applied only when
its number is still the latest one, so a slow stale response can never
overwrite a fresher result.

Usage:
    async with MusicBrainzClient() as client:
        debouncer = SuggestionDebouncer(client.suggest, on_update=render)
        debouncer.schedule("artist", "ag c")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_QUIET_WINDOW = 0.3  # seconds

Operation = Callable[[str, str], Awaitable[list[Any]]]
UpdateCallback = Callable[[str, list[Any]], None]
ErrorCallback = Callable[[str, Exception], None]


@dataclass
class DebounceState:
    """Mutable debounce bookkeeping for a single channel."""

    pending_timer: asyncio.TimerHandle | None = None
    last_args: str | None = None
    sequence: int = 0
    suggestions: list[Any] = field(default_factory=list)

    def cancel_timer(self) -> bool:
        """Cancel the pending timer, if any. Returns True if one was pending."""
        if self.pending_timer is None:
            return False
        self.pending_timer.cancel()
        self.pending_timer = None
        return True


class SuggestionDebouncer:
    """
    Debounced suggestion fetching, keyed by channel.

    Channels (e.g. song/artist/album) are fully independent: separate timers,
    separate sequence numbers and separate suggestion lists. All methods must be
    called from the event loop that owns the debouncer.
    """

    def __init__(
        self,
        operation: Operation,
        quiet_window: float = DEFAULT_QUIET_WINDOW,
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
    ):
        """
        Args:
            operation: Async fetch called as operation(channel, value)
            quiet_window: Seconds without a new schedule before the fetch runs
            on_update: Called with (channel, suggestions) whenever a channel's
                suggestions change
            on_error: Called with (channel, exception) when the latest fetch
                for a channel fails
        """
        if quiet_window < 0:
            raise ValueError(f"quiet_window must not be negative, got {quiet_window}")
        self._operation = operation
        self.quiet_window = quiet_window
        self.on_update = on_update
        self.on_error = on_error
        self._states: dict[str, DebounceState] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def _state(self, channel: str) -> DebounceState:
        channel = str(channel)
        if channel not in self._states:
            self._states[channel] = DebounceState()
        return self._states[channel]

    def _notify(self, channel: str, suggestions: list[Any]) -> None:
        if self.on_update is not None:
            self.on_update(channel, suggestions)

    def schedule(self, channel: str, value: str) -> None:
        """
        Schedule a suggestion fetch for a channel.

        A blank value clears the channel immediately and issues no request.
        """
        channel = str(channel)
        state = self._state(channel)

        if state.cancel_timer():
            logger.debug(f"[{channel}] superseded pending fetch for {state.last_args!r}")

        state.sequence += 1
        state.last_args = value

        if not value or not value.strip():
            state.suggestions = []
            self._notify(channel, [])
            return

        loop = asyncio.get_running_loop()
        state.pending_timer = loop.call_later(
            self.quiet_window, self._fire, channel, state.sequence, value
        )

    def _fire(self, channel: str, sequence: int, value: str) -> None:
        state = self._state(channel)
        state.pending_timer = None

        task = asyncio.ensure_future(self._run(channel, sequence, value))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            logger.error(f"Suggestion callback failed: {exc!r}")

    async def _run(self, channel: str, sequence: int, value: str) -> None:
        state = self._state(channel)
        logger.debug(f"[{channel}] fetching suggestions for {value!r} (#{sequence})")

        try:
            results = await self._operation(channel, value)
        except Exception as e:
            if sequence != state.sequence:
                logger.debug(f"[{channel}] ignoring failure of superseded fetch #{sequence}: {e}")
                return
            if self.on_error is not None:
                self.on_error(channel, e)
            else:
                logger.warning(f"Failed to fetch {channel} suggestions: {e}")
            return

        if sequence != state.sequence:
            logger.debug(f"[{channel}] discarding stale result #{sequence} (latest #{state.sequence})")
            return

        state.suggestions = list(results)
        self._notify(channel, state.suggestions)

    def suggestions(self, channel: str) -> list[Any]:
        """Current suggestions for a channel (last good value)."""
        return list(self._state(channel).suggestions)

    def pending(self, channel: str) -> bool:
        """True while a fetch for the channel is waiting for its quiet window."""
        return self._state(channel).pending_timer is not None

    def cancel(self, channel: str) -> None:
        """Cancel the pending fetch and discard any in-flight result for a channel."""
        state = self._state(channel)
        state.cancel_timer()
        state.sequence += 1

    def cancel_all(self) -> None:
        for channel in list(self._states):
            self.cancel(channel)

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and every started fetch has finished."""
        while True:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            elif any(state.pending_timer is not None for state in self._states.values()):
                await asyncio.sleep(self.quiet_window / 2 or 0.001)
            else:
                return
