"""Per-page-load session state."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cookie_cutter.browser.driver import MutationSubscription


@dataclasses.dataclass
class SessionState:
    """Mutable state shared by every component for one page load.

    ``accepted`` only ever goes from ``False`` to ``True``; every
    action-taking path checks it first.  ``handshake_active`` is set
    between the primary click and the end of the completion
    handshake so that concurrent detection passes do not click a
    second accept control while the first one is being confirmed.

    Once ``closed`` is set the page load is gone: nothing may be
    spawned and no completion may run.
    """

    enabled: bool = True
    accepted: bool = False
    handshake_active: bool = False
    closed: bool = False
    retry_subscription: MutationSubscription | None = None
    debounce_timer: asyncio.TimerHandle | None = None
    handshake_subscription: MutationSubscription | None = None
    handshake_timer: asyncio.TimerHandle | None = None
    pass_lock: asyncio.Lock = dataclasses.field(default_factory=asyncio.Lock)
    tasks: set[asyncio.Task[Any]] = dataclasses.field(default_factory=set)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
        """Run *coro* as a task owned by this session.

        Returns ``None`` (and discards *coro*) once the session is closed.
        """
        if self.closed:
            coro.close()
            return None
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task

    def cancel_all(self) -> list[MutationSubscription]:
        """Close the session and cancel its timers and tasks.

        Returns:
            The still-registered observers; the caller disconnects them.
        """
        self.closed = True
        for timer in (self.debounce_timer, self.handshake_timer):
            if timer is not None:
                timer.cancel()
        self.debounce_timer = None
        self.handshake_timer = None
        for task in list(self.tasks):
            task.cancel()
        return [s for s in (self.retry_subscription, self.handshake_subscription) if s is not None]
