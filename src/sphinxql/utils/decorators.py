"""Tracing and retry decorators.

``traced`` opens an OpenTelemetry CLIENT span around a call to the search
engine; ``retry_with_backoff`` re-runs a call that failed with a transient
error. Both are synchronous, matching the blocking execution model.
"""

import functools
import time
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from sphinxql.logging.logger import get_logger
from sphinxql.telemetry import get_tracer

T = TypeVar("T")

logger = get_logger(__name__)

_DEFAULT_SPAN_ATTRIBUTES = {"db.system": "sphinx"}


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.CLIENT,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Run the decorated call inside a span.

    Args:
        span_name: Span name; ``sphinxql.<qualified function name>`` when omitted
        kind: Span kind
        attributes: Static attributes, merged over ``db.system=sphinx``
        attribute_getter: Called with the decorated call's arguments; its
            result is merged last. A failing getter only costs the attributes.

    Example:
        >>> @traced("sphinxql.query.execute", attribute_getter=lambda self: {"db.sphinx.indexes": "articles"})
        ... def execute(self): ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = span_name or f"sphinxql.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            span_attributes = dict(_DEFAULT_SPAN_ATTRIBUTES, **(attributes or {}))
            if attribute_getter is not None:
                try:
                    span_attributes.update(attribute_getter(*args, **kwargs) or {})
                except Exception as exc:
                    logger.warning("Could not collect span attributes for %s: %s", name, exc)

            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in span_attributes.items():
                    if value is not None:
                        span.set_attribute(key, value)

                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper

    return decorator


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retry_on: Optional[Tuple[Type[Exception], ...]] = None,
    retry_condition: Optional[Callable[[Exception], bool]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a call with exponential backoff.

    The n-th retry waits ``min(initial_delay * exponential_base ** n, max_delay)``
    seconds. An error is retried when it is an instance of ``retry_on`` (any
    exception when None) and ``retry_condition`` (if given) accepts it;
    otherwise, or once ``max_retries`` retries are spent, it propagates.

    Example:
        >>> @retry_with_backoff(max_retries=5, retry_condition=lambda e: e.is_retryable)
        ... def connect():
        ...     return engine.connect()
    """

    def should_retry(exc: Exception) -> bool:
        if retry_on is not None and not isinstance(exc, retry_on):
            return False
        return retry_condition is None or retry_condition(exc)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not should_retry(exc):
                        raise
                    if attempt >= max_retries:
                        logger.error(
                            "Giving up on %s after %d attempts",
                            func.__name__,
                            attempt + 1,
                            extra={"error": str(exc)},
                        )
                        raise

                    attempt += 1
                    logger.warning(
                        "Attempt %d of %s failed, retrying in %.2fs",
                        attempt,
                        func.__name__,
                        delay,
                        extra={"error": str(exc)},
                    )
                    time.sleep(delay)
                    delay = min(delay * exponential_base, max_delay)

        return wrapper

    return decorator


retry = retry_with_backoff
