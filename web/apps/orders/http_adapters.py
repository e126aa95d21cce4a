"""HTTP payments client with retries, a circuit breaker and context headers.

This module implements the concrete ``PaymentsPort`` used in deployed
environments. It adds:

- Request correlation: propagates ``X-Request-ID`` from the ContextVar set
    by the gateway middleware.
- A circuit breaker in front of the payments service to avoid hammering an
    unhealthy dependency, with HALF_OPEN probing after a timeout.
- A simple retry policy with exponential backoff for transport errors and
    5xx responses.
"""

import logging
import threading
import time
from decimal import Decimal
from typing import Optional

import httpx
from django.conf import settings

from gateway.middleware import REQUEST_ID_CTX
from .domain import PaymentsPort

logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    """Raised when the breaker refuses a call (``CIRCUIT_OPEN`` or
    ``CIRCUIT_HALF_OPEN_BUSY``)."""


# ---------------- Circuit Breaker ---------------- #

class CircuitBreaker:
    """Minimal circuit breaker with CLOSED/OPEN/HALF_OPEN states.

    Transitions:
    - CLOSED → OPEN when failures reach ``fail_threshold``.
    - OPEN → HALF_OPEN after ``reset_timeout`` seconds.
    - HALF_OPEN → CLOSED on a successful probe; only one probe may be in
      flight; back to OPEN on failure.

    Thread-safe via an internal lock.
    """

    def __init__(self, name: str, fail_threshold: int, reset_timeout: float):
        self.name = name
        self.fail_threshold = fail_threshold
        self.reset_timeout = reset_timeout
        self._lock = threading.RLock()
        self._failures = 0
        self._state = "CLOSED"  # CLOSED | OPEN | HALF_OPEN
        self._opened_at = 0.0
        self._half_open_probe_in_flight = False

    @property
    def state(self) -> str:
        """Current breaker state with time-based transition handling."""
        with self._lock:
            if self._state == "OPEN" and (time.monotonic() - self._opened_at) >= self.reset_timeout:
                self._state = "HALF_OPEN"
                self._half_open_probe_in_flight = False
            return self._state

    def before_call(self) -> str:
        """Check and update state before a protected call.

        Returns:
            str: The state at call time.

        Raises:
            CircuitOpenError: If the circuit is OPEN or a HALF_OPEN probe is busy.
        """
        with self._lock:
            st = self.state
            if st == "OPEN":
                raise CircuitOpenError("CIRCUIT_OPEN")
            if st == "HALF_OPEN":
                if self._half_open_probe_in_flight:
                    raise CircuitOpenError("CIRCUIT_HALF_OPEN_BUSY")
                self._half_open_probe_in_flight = True
            return st

    def on_success(self):
        with self._lock:
            self._failures = 0
            self._state = "CLOSED"
            self._half_open_probe_in_flight = False

    def on_failure(self):
        """Record a failed call; open the breaker once the threshold is hit.

        A failed HALF_OPEN probe reopens immediately.
        """
        with self._lock:
            self._failures += 1
            if self._state == "HALF_OPEN" or (
                self._failures >= self.fail_threshold and self._state != "OPEN"
            ):
                if self._state != "OPEN":
                    logger.warning("circuit opened", extra={"circuit": self.name, "failures": self._failures})
                self._state = "OPEN"
                self._opened_at = time.monotonic()
                self._half_open_probe_in_flight = False

    def on_finish(self):
        with self._lock:
            if self._state == "HALF_OPEN":
                self._half_open_probe_in_flight = False


_payments_cb = CircuitBreaker(
    "payments",
    getattr(settings, "HTTP_CIRCUIT_FAIL_THRESHOLD", 5),
    getattr(settings, "HTTP_CIRCUIT_RESET_TIMEOUT", 30.0),
)


# ---------------- Helpers ---------------- #

def _request_headers(extra: Optional[dict] = None) -> dict:
    """Build base headers including X-Request-ID and any extras.

    Args:
        extra: Optional dict of additional headers to include.

    Returns:
        dict: Final headers dictionary for the outgoing request.
    """
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def _retry_policy():
    """Return retry configuration as (max_retries, backoff_base_seconds)."""
    return (
        getattr(settings, "HTTP_RETRY_MAX", 3),
        getattr(settings, "HTTP_RETRY_BACKOFF_BASE", 0.15),
    )


def _should_retry(resp: Optional[httpx.Response], exc: Optional[Exception]) -> bool:
    # Retry only on transport errors or 5xx
    if exc is not None:
        return True
    if resp is not None and 500 <= resp.status_code < 600:
        return True
    return False


# ---------------- Payments Adapter ---------------- #

class HttpPaymentsClient(PaymentsPort):
    """HTTP client for the payments service with retry and circuit breaker."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.PAYMENTS_BASE_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS

    def process_payment(self, amount: Decimal) -> bool:
        """Ask the payments service to authorize a charge.

        Applies a circuit-breaker precheck and retries on transport errors
        and 5xx. Business mappings:
        - any 2xx → the ``paid`` field of the body (True when missing or
          when the body is empty)
        - 402 or 409 → False, not counted as a circuit failure

        Args:
            amount: Amount to charge, sent as a decimal string.

        Returns:
            bool: True when the charge is authorized, False when declined.

        Raises:
            CircuitOpenError: If the circuit is open.
            httpx.RequestError: For network/transport errors after retries.
            httpx.HTTPStatusError: For 5xx after retries, or any other
                non-2xx response (no retry).
        """
        payload = {"amount": str(amount)}
        max_retries, backoff = _retry_policy()
        tries = 0

        state = _payments_cb.before_call()
        headers = _request_headers({"X-Circuit-State": state, "X-Retry-Count": "0"})

        try:
            with httpx.Client(timeout=self.timeout) as client:
                while True:
                    resp = None
                    exc = None
                    try:
                        resp = client.post(f"{self.base_url}/charge", json=payload, headers=headers)
                        if resp.is_success:
                            _payments_cb.on_success()
                            data = resp.json() if resp.content else {}
                            return bool(data.get("paid", True))
                        if resp.status_code in (402, 409):
                            _payments_cb.on_success()  # business outcome, not a circuit failure
                            return False
                        if not _should_retry(resp, None):
                            resp.raise_for_status()
                    except httpx.RequestError as e:
                        exc = e

                    tries += 1
                    headers["X-Retry-Count"] = str(tries)

                    if tries > max_retries:
                        _payments_cb.on_failure()
                        logger.warning(
                            "payments call failed",
                            extra={"tries": tries, "status": getattr(resp, "status_code", None)},
                        )
                        if exc:
                            raise exc
                        raise httpx.HTTPStatusError(
                            f"payments returned {resp.status_code}", request=resp.request, response=resp
                        )

                    sleep_s = backoff * (2 ** (tries - 1))  # exponential backoff
                    cap = getattr(settings, "HTTP_RETRY_MAX_SLEEP", 0.5)
                    time.sleep(min(sleep_s, cap))
        finally:
            _payments_cb.on_finish()
