from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class TimedOut:
    timeout_s: float


@dataclass(frozen=True)
class Failed:
    reason: str


FetchResult = Union[Ok[T], TimedOut, Failed]


async def fetch_with_timeout(
    func: Callable[..., T],
    *args: Any,
    timeout_s: float,
    label: str = "fetch",
) -> FetchResult[T]:
    """Run a blocking store call in a worker thread, racing it against a deadline.

    Never raises for timeouts or call failures; callers decide what the
    defaults are by matching on the returned variant.
    """
    try:
        value = await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.warning("store_read_timeout label=%s timeout_s=%s", label, timeout_s)
        return TimedOut(timeout_s=timeout_s)
    except Exception as exc:  # noqa: BLE001 - converted to a tagged result
        logger.warning("store_read_failed label=%s: %s", label, exc)
        return Failed(reason=str(exc) or exc.__class__.__name__)
    return Ok(value)


def value_or(result: FetchResult[T], default: T) -> T:
    if isinstance(result, Ok):
        return result.value
    return default
