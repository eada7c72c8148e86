import random
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
from pydantic import TypeAdapter

from centraldogma.shared.errors import DecodeError

DELAY_ON_SUCCESS_S = 1.0
DELAY_ON_UNCHANGED_S = 1.0
MAX_FAILED_COUNT = 5  # max base wait time: 2 << 5 = 64s
JITTER_RATE = 0.2

def make_watch_stats() -> dict:
    """
    Returns a fresh stats dictionary with zeroed counters.
    Every watch stream calls this once in __init__.
    Keys: polls, notifications_received, empty_responses, reconnect_count,
          last_event_at, connected_at.
    """
    return {
        "polls": 0,
        "notifications_received": 0,
        "empty_responses": 0,
        "reconnect_count": 0,
        "last_event_at": None,
        "connected_at": datetime.now(timezone.utc).isoformat()
    }

def delay_time_for(failed_count: int, rand: Callable[[], float] = random.random) -> float:
    """
    Backoff delay in seconds after `failed_count` consecutive failures.

    The base doubles per failure starting at 2s (2 << failed_count seconds), and less than
    20% of jitter is added on top so that clients watching the same server don't retry
    in lockstep. Callers keep `failed_count` within [0, MAX_FAILED_COUNT].
    """
    base_ms = (2 << failed_count) * 1000
    jitter_ms = JITTER_RATE * base_ms * rand()
    return (base_ms + jitter_ms) / 1000.0

def decode_json(response: httpx.Response, model: Any) -> Any:
    """
    Decodes a response body into `model` (a pydantic model or any type TypeAdapter accepts,
    e.g. list[Project]). Malformed JSON and schema mismatches both surface as DecodeError.
    """
    try:
        return TypeAdapter(model).validate_python(response.json())
    except ValueError as e:
        raise DecodeError(f"Failed to parse json: {e}") from e
