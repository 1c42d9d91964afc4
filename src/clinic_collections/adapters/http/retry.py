"""HTTP adapter – TenacityRetryPolicy for transient transport failures."""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import tenacity

from clinic_collections.kernel.errors import NetworkError
from clinic_collections.observability.logging import get_logger

T = TypeVar("T")

_log = get_logger(__name__)


def _log_retry(state: tenacity.RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome is not None else None
    _log.info(
        "http_retry",
        attempt=state.attempt_number,
        delay=round(state.next_action.sleep, 3) if state.next_action else None,
        status=getattr(exc, "status_code", None),
    )


class TenacityRetryPolicy:
    """Retry policy backed by the ``tenacity`` library.

    Parameters
    ----------
    max_retries:
        Retries after the first attempt; ``0`` disables retrying.
    base_delay:
        Seconds of the first backoff step; doubles per attempt up to
        *max_delay*, plus up to *jitter* seconds of random jitter.
    retry:
        A ``tenacity`` retry predicate.  Defaults to retrying on
        :class:`NetworkError` only.
    kwargs:
        Additional keyword arguments forwarded to :class:`tenacity.AsyncRetrying`.

    Example
    -------
    ::

        policy = TenacityRetryPolicy(max_retries=3, base_delay=1.0)
        body = await policy.execute_async(lambda: client.get("/patients"))
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.5,
        retry: Any = None,
        **kwargs: Any,
    ) -> None:
        self._max_retries = max_retries
        self._wait = tenacity.wait_exponential(multiplier=base_delay, max=max_delay) + tenacity.wait_random(0, jitter)
        self._retry = retry or tenacity.retry_if_exception_type(NetworkError)
        self._extra_kwargs = kwargs

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def _build_async_retrying(self) -> tenacity.AsyncRetrying:
        options: dict[str, Any] = {
            "stop": tenacity.stop_after_attempt(self.max_attempts),
            "wait": self._wait,
            "retry": self._retry,
            "reraise": True,
            "before_sleep": _log_retry,
        }
        options.update(self._extra_kwargs)
        return tenacity.AsyncRetrying(**options)

    async def execute_async(self, func: Callable[[], Awaitable[T]]) -> T:
        """Execute *func* asynchronously with tenacity retry."""
        async for attempt in self._build_async_retrying():
            with attempt:
                result = await func()
        return result  # type: ignore[return-value]


__all__ = ["TenacityRetryPolicy"]
