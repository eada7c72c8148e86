"""
MODULE OVERVIEW:
The long-polling watch client: one state machine plus the stream that drives it.

WHAT IS HAPPENING HERE:
Every poll is a conditional GET carrying the last revision we have seen. The server holds
it open for up to `timeout_s` seconds (60 by default) and answers either 200 with the new
revision, or 304 when nothing changed in that window. Our client-side timeout is set
5 seconds HIGHER than the server's wait, so normally the server hangs up first. That budget
covers the whole round trip, so a server trickling out its body cannot stretch a poll.

Outcomes of one poll:
  - 200          -> CHANGED. Remember the revision, reset the failure counter, and wait 1s
                    before the next poll.
  - 304          -> UNCHANGED. Re-poll after 1s, no backoff.
  - our timeout  -> treated exactly like a 304.
  - anything else (refused connection, 5xx, garbage body) -> TRANSIENT_FAILURE with
                    exponential backoff: 4s, 8s, ... capped at 64s, plus under 20% jitter.
  - the request could not even be built -> FATAL_FAILURE. The stream ends.

`poll()` never touches the network state of a stream directly: it takes a WatchState and
returns a new one, so the whole state machine can be tested against a fake client.
"""
import asyncio
import contextlib
import random
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx
from loguru import logger

from centraldogma.client.targets import WatchTarget
from centraldogma.shared.client_utils import (
    DELAY_ON_SUCCESS_S,
    DELAY_ON_UNCHANGED_S,
    MAX_FAILED_COUNT,
    delay_time_for,
    make_watch_stats,
)
from centraldogma.shared.errors import CentralDogmaError, InvalidParams, RequestBuildError
from centraldogma.shared.models import Revision, WatchFileResult, WatchRepoResult

if TYPE_CHECKING:
    from centraldogma.client.base_client import Client

Notification = WatchFileResult | WatchRepoResult

class PollOutcome(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    TRANSIENT_FAILURE = "transient_failure"
    FATAL_FAILURE = "fatal_failure"

@dataclass(frozen=True)
class WatchState:
    last_known_revision: Revision | None = None
    consecutive_failures: int = 0
    pending_post_success_delay: float | None = None

@dataclass(frozen=True)
class PollResult:
    outcome: PollOutcome
    delay: float = 0.0
    notification: Notification | None = None
    error: Exception | None = None

async def request_watch(client: "Client", req: httpx.Request, target: WatchTarget) -> Notification | None:
    """Sends one watch request. Returns None on 304, raises on any failure."""
    response = await client.request(req)
    if response.status_code == 304:
        return None
    ok_response = client.status_unwrap(response)
    return target.decode(ok_response)

async def poll(
    client: "Client",
    target: WatchTarget,
    state: WatchState,
    timeout_s: float,
    rand: Callable[[], float] = random.random,
) -> tuple[PollResult, WatchState]:
    """Runs a single long-poll cycle and classifies its outcome."""
    try:
        req = client.new_watch_request(target.path(), state.last_known_revision, timeout_s)
    except RequestBuildError as e:
        logger.error(f"Watch target {target} Cannot build request Error {e}")
        return PollResult(PollOutcome.FATAL_FAILURE, error=e), state

    # httpx only bounds each phase (connect, read...); this bounds the whole round trip
    budget_s = timeout_s + client.settings.WATCH_TIMEOUT_BUFFER_S
    try:
        notification = await asyncio.wait_for(request_watch(client, req, target), budget_s)
    except (httpx.TimeoutException, asyncio.TimeoutError):
        logger.debug(f"Watch target {target} timed out, polling again")
        return PollResult(PollOutcome.UNCHANGED, delay=DELAY_ON_UNCHANGED_S), state
    except (httpx.HTTPError, CentralDogmaError) as e:
        failed_count = min(state.consecutive_failures + 1, MAX_FAILED_COUNT)
        delay = delay_time_for(failed_count, rand)
        logger.debug(
            f"Watch target {target} Attempt {failed_count} "
            f"Delay {delay:.2f}s Error {e!r}"
        )
        new_state = replace(state, consecutive_failures=failed_count)
        return PollResult(PollOutcome.TRANSIENT_FAILURE, delay=delay, error=e), new_state

    if notification is None:
        new_state = replace(state, consecutive_failures=0)
        return PollResult(PollOutcome.UNCHANGED, delay=DELAY_ON_UNCHANGED_S), new_state

    new_state = WatchState(
        last_known_revision=notification.revision,
        consecutive_failures=0,
        pending_post_success_delay=DELAY_ON_SUCCESS_S,
    )
    return PollResult(PollOutcome.CHANGED, notification=notification), new_state

class WatchStream:
    """
    An endless async iterator of change notifications for one watch target.

        async with client.repo("foo", "bar").watch_file_stream(Query.of_json("/a.json")) as stream:
            async for result in stream:
                print(result.revision, result.entry.content)

    Each `__anext__` keeps polling until something changes. Only one poll is in flight at a
    time. `aclose()` (or leaving the `async with` block) aborts an in-flight request or sleep
    right away, and nothing is yielded after that. A closed stream cannot be restarted.

    If the stream ends on its own, a request could not be built; the reason is in `error`.
    """

    def __init__(
        self,
        client: "Client",
        target: WatchTarget,
        timeout_s: float | None = None,
        initial_revision: Revision | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ):
        self.client = client
        self.target = target
        self.timeout_s = client.settings.WATCH_TIMEOUT_S if timeout_s is None else timeout_s
        if self.timeout_s < 0:
            raise InvalidParams(f"watch timeout cannot be negative: {self.timeout_s}")
        self.state = WatchState(last_known_revision=initial_revision)
        self.error: Exception | None = None

        self.on_status_change_callback: Callable[[str], Awaitable[None]] | None = None
        self.stats = make_watch_stats()

        self._sleep = sleep
        self._rand = rand
        self._closed = False
        self._pull: asyncio.Future | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def notifications_received(self): return self.stats["notifications_received"]

    @property
    def reconnect_count(self): return self.stats["reconnect_count"]

    @property
    def empty_responses(self): return self.stats["empty_responses"]

    def set_status_callback(self, on_status_change: Callable[[str], Awaitable[None]] | None) -> None:
        self.on_status_change_callback = on_status_change

    async def _emit_status(self, status: str):
        if self.on_status_change_callback:
            await self.on_status_change_callback(status)

    def __aiter__(self) -> "WatchStream":
        return self

    async def __anext__(self) -> Notification:
        if self._closed:
            raise StopAsyncIteration
        if self._pull is not None:
            raise RuntimeError("WatchStream is already being pulled")

        self._pull = asyncio.ensure_future(self._next_notification())
        try:
            notification = await self._pull
        except asyncio.CancelledError:
            stopped_by_close = self._closed
            self._closed = True
            if stopped_by_close:
                raise StopAsyncIteration
            raise
        finally:
            self._pull = None

        if notification is None or self._closed:
            self._closed = True
            raise StopAsyncIteration
        return notification

    async def _next_notification(self) -> Notification | None:
        delay = self.state.pending_post_success_delay
        if delay:
            self.state = replace(self.state, pending_post_success_delay=None)
            await self._sleep(delay)

        while True:
            await self._emit_status("WAITING")
            self.stats["polls"] += 1
            result, self.state = await poll(
                self.client, self.target, self.state, self.timeout_s, self._rand
            )

            if result.outcome is PollOutcome.CHANGED:
                self.stats["notifications_received"] += 1
                self.stats["last_event_at"] = datetime.now(timezone.utc).isoformat()
                await self._emit_status("ACTIVE (data)")
                return result.notification

            if result.outcome is PollOutcome.FATAL_FAILURE:
                self.error = result.error
                await self._emit_status("FAILED")
                return None

            if result.outcome is PollOutcome.UNCHANGED:
                self.stats["empty_responses"] += 1
                await self._emit_status("ACTIVE (unchanged)")
            else:
                self.stats["reconnect_count"] += 1
                await self._emit_status(f"RETRYING in {result.delay:.1f}s")
            await self._sleep(result.delay)

    async def aclose(self) -> None:
        if self._closed and self._pull is None:
            return
        self._closed = True
        pull = self._pull
        if pull is not None and not pull.done():
            pull.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pull
        logger.debug(f"Watch target {self.target} stream closed")
        await self._emit_status("CLOSED")

    async def __aenter__(self) -> "WatchStream":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

def watch_stream(client: "Client", target: WatchTarget, **kwargs) -> WatchStream:
    """Generic entry point for any WatchTarget; see RepoClient.watch_file_stream / watch_repo_stream."""
    return WatchStream(client, target, **kwargs)
