"""Calendar provider exceptions and retry logic for Google Calendar calls.

Defines the provider-side error taxonomy and a ``@with_retry`` decorator
that absorbs transient failures (rate limits, expired tokens, network
errors) with exponential backoff before they reach the reconciler.

Exception hierarchy::

    CalendarError                 (base for all provider-side errors)
    +-- CalendarAuthError         (missing / expired credential)
    +-- CalendarProviderError     (remote API rejected a request)
        +-- CalendarRateLimitError (HTTP 429, or 403 rate-limit reasons)
        +-- CalendarNotFoundError  (HTTP 404 / 410)

``CalendarAuthError`` does not derive from ``CalendarProviderError``, so
handlers that absorb provider errors on delete still let auth failures
through.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from googleapiclient.errors import HttpError

if TYPE_CHECKING:
    from taskcal.models.results import SyncResult

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------


class CalendarError(Exception):
    """Base exception for calendar provider failures.

    Attributes:
        partial_result: Set by :meth:`Reconciler.reconcile` when the error
            aborts a pass part-way.  Holds the writes applied before it,
            including the pending links of events already created.
    """

    partial_result: SyncResult | None = None


class CalendarAuthError(CalendarError):
    """Raised when no valid access credential is available.

    Covers a missing token file, a token that cannot be refreshed, and
    HTTP 401 responses that persist after one refresh.  Fatal to a whole
    reconciliation pass; the caller must re-authenticate.
    """

    def __init__(self, message: str = "Calendar authentication failed") -> None:
        super().__init__(message)
        self.status_code = 401


class CalendarProviderError(CalendarError):
    """Raised when the calendar API rejects a request.

    Attributes:
        status_code: HTTP status code from the API, or ``None`` if the
            error did not originate from an HTTP response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CalendarRateLimitError(CalendarProviderError):
    """Raised when the provider keeps rate-limiting after all retries."""

    def __init__(self, message: str = "Calendar API rate limit exceeded") -> None:
        super().__init__(message, status_code=429)


class CalendarNotFoundError(CalendarProviderError):
    """Raised when an event id no longer exists (HTTP 404 or 410)."""

    def __init__(self, message: str = "Calendar resource not found") -> None:
        super().__init__(message, status_code=404)


# ---------------------------------------------------------------------------
# Retry decorator
# ---------------------------------------------------------------------------

_DEFAULT_MAX_RETRIES = 3
_DEFAULT_BASE_DELAY = 1.0  # seconds
_AUTH_RETRY_LIMIT = 1  # 401 gets one retry after token refresh

# Google reports some quota errors as 403 with one of these reasons.
_RATE_LIMIT_REASONS = frozenset({"rateLimitExceeded", "userRateLimitExceeded"})


def _error_reasons(error: HttpError) -> set[str]:
    """Collect the ``reason`` fields from an ``HttpError``'s details."""
    details = getattr(error, "error_details", None)
    if not isinstance(details, list):
        return set()
    return {d.get("reason", "") for d in details if isinstance(d, dict)}


def classify_http_error(error: HttpError) -> CalendarError:
    """Map an ``HttpError`` to the matching calendar exception.

    Args:
        error: The ``googleapiclient.errors.HttpError`` to classify.

    Returns:
        A :class:`CalendarError` subclass matching the HTTP status code.
    """
    status = error.resp.status

    if status in (404, 410):
        return CalendarNotFoundError(str(error))
    if status == 429 or (status == 403 and _error_reasons(error) & _RATE_LIMIT_REASONS):
        return CalendarRateLimitError(str(error))
    if status == 401:
        return CalendarAuthError(str(error))
    return CalendarProviderError(str(error), status_code=status)


def with_retry(
    max_retries: int | None = None,
    base_delay: float | None = None,
) -> Callable[[F], F]:
    """Decorator that retries Calendar API calls on transient failures.

    Retry policy:
    - **Rate limits** (429, 403 ``rateLimitExceeded``): exponential backoff,
      up to *max_retries*, then :class:`CalendarRateLimitError`.
    - **HTTP 401**: refresh credentials via ``self._refresh_credentials()``
      (if available), retry once, then :class:`CalendarAuthError`.
    - **Network errors** (``OSError``, ``TimeoutError``): exponential
      backoff, up to *max_retries*, then :class:`CalendarProviderError`.
    - **HTTP 404 / 410**: :class:`CalendarNotFoundError` immediately.
    - Other HTTP errors: :class:`CalendarProviderError` immediately.  These
      are permanent (for example a 403 on a protected holiday event).

    When *max_retries* or *base_delay* is ``None`` the value is read from
    the instance's ``_max_retries`` / ``_base_delay`` attributes, falling
    back to 3 retries and a 1 second base delay.

    Args:
        max_retries: Maximum retry attempts for rate-limit and network
            errors.
        base_delay: Initial backoff delay in seconds, doubled per retry.

    Returns:
        A decorator that wraps the target method with retry logic.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            instance = args[0] if args else None
            retries = max_retries
            if retries is None:
                retries = getattr(instance, "_max_retries", _DEFAULT_MAX_RETRIES)
            delay_base = base_delay
            if delay_base is None:
                delay_base = getattr(instance, "_base_delay", _DEFAULT_BASE_DELAY)

            auth_retries = 0
            attempt = 0

            while True:
                try:
                    return func(*args, **kwargs)

                except HttpError as exc:
                    cal_error = classify_http_error(exc)

                    if isinstance(cal_error, CalendarNotFoundError):
                        logger.debug("Resource not found (%s): %s", exc.resp.status, exc)
                        raise cal_error from exc

                    if isinstance(cal_error, CalendarRateLimitError):
                        if attempt >= retries:
                            logger.error(
                                "Rate limit exceeded after %d retries: %s", retries, exc
                            )
                            raise cal_error from exc
                        delay = delay_base * (2**attempt)
                        attempt += 1
                        logger.warning(
                            "Rate limited (%s), retrying in %.1fs (attempt %d/%d)",
                            exc.resp.status,
                            delay,
                            attempt,
                            retries,
                        )
                        time.sleep(delay)
                        continue

                    if isinstance(cal_error, CalendarAuthError):
                        if auth_retries >= _AUTH_RETRY_LIMIT:
                            logger.error("Auth failed after token refresh: %s", exc)
                            raise cal_error from exc
                        auth_retries += 1
                        logger.warning("Auth expired (401), attempting token refresh")
                        refresh = getattr(instance, "_refresh_credentials", None)
                        if callable(refresh):
                            try:
                                refresh()
                            except Exception as refresh_exc:
                                logger.error("Token refresh failed: %s", refresh_exc)
                                raise CalendarAuthError(
                                    f"Token refresh failed: {refresh_exc}"
                                ) from refresh_exc
                        else:
                            logger.warning("No _refresh_credentials method available")
                        continue

                    logger.error(
                        "Calendar API error (HTTP %s): %s", cal_error.status_code, exc
                    )
                    raise cal_error from exc

                except (OSError, TimeoutError) as exc:
                    if attempt >= retries:
                        logger.error("Network error after %d retries: %s", retries, exc)
                        raise CalendarProviderError(
                            f"Network error after {retries} retries: {exc}"
                        ) from exc
                    delay = delay_base * (2**attempt)
                    attempt += 1
                    logger.warning(
                        "Network error, retrying in %.1fs (attempt %d/%d): %s",
                        delay,
                        attempt,
                        retries,
                        exc,
                    )
                    time.sleep(delay)
                    continue

        return wrapper  # type: ignore[return-value]

    return decorator
