"""Threshold-based routing of calculations to the background worker.

A ComputationDispatcher wraps one pure calculation. Small inputs run on the
calling thread; inputs at or above the threshold are serialized and sent to
an AnalysisWorker. A failed background run is retried synchronously before
any error is surfaced.

submit() adds the consumer-side behaviour: debounced input changes and a
staleness guard that drops results for inputs that have since been replaced.
"""

import logging
import threading
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from app.config import settings
from app.services.background import AnalysisWorker, can_use_background, warn_background_fallback

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")

# Marker for a run whose input was replaced before it finished
_STALE = object()


class CalculationError(Exception):
    """Raised when a calculation fails on every execution path."""

    def __init__(self, kind: str, reason: str):
        super().__init__(f"Failed to calculate {kind}: {reason}")
        self.kind = kind
        self.reason = reason


class ComputationDispatcher(Generic[TResult]):
    """Runs one calculation synchronously or on the background worker.

    Attributes:
        kind: Payload kind understood by the worker message router
        threshold: Input size at or above which the worker is used
        debounce_ms: Delay applied by submit() before computing
        result: Result of the latest submitted input
        error: CalculationError of the latest submitted input, if any
        is_calculating: True while a submitted input is being computed
    """

    def __init__(
        self,
        calculate: Callable[[Any], TResult],
        kind: str,
        result_type: Any,
        *,
        worker: Optional[AnalysisWorker] = None,
        threshold: Optional[int] = None,
        debounce_ms: Optional[int] = None,
        timeout: Optional[float] = None,
        payload_extras: Optional[dict[str, Any]] = None,
        to_payload: Optional[Callable[[Any], dict[str, Any]]] = None,
        get_input_size: Callable[[Any], int] = len,
        on_result: Optional[Callable[[TResult], None]] = None,
        on_error: Optional[Callable[[CalculationError], None]] = None,
    ):
        self.kind = kind
        self.threshold = settings.offload_threshold if threshold is None else threshold
        self.debounce_ms = settings.debounce_ms if debounce_ms is None else debounce_ms
        self.timeout = settings.worker_timeout_seconds if timeout is None else timeout

        self._calculate = calculate
        self._adapter = TypeAdapter(result_type)
        self._worker = worker
        self._payload_extras = payload_extras or {}
        self._to_payload = to_payload or self._parts_payload
        self._get_input_size = get_input_size
        self._on_result = on_result
        self._on_error = on_error

        self.result: Optional[TResult] = None
        self.error: Optional[CalculationError] = None
        self.is_calculating = False

        self._lock = threading.Lock()
        self._latest: Any = None
        self._timer: Optional[threading.Timer] = None
        self._settled = threading.Event()
        self._settled.set()
        self._closed = False

    # =========================================================================
    # Single computation
    # =========================================================================

    def compute(self, data: Any) -> TResult:
        """Compute a result for one input, offloading large inputs.

        Raises:
            CalculationError: If the synchronous run (or fallback) fails
        """
        return self._execute(data, lambda: True)

    def _parts_payload(self, parts: Sequence[Any]) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "parts": to_jsonable_python(list(parts)),
            **self._payload_extras,
        }

    def _should_offload(self, data: Any) -> bool:
        if self._get_input_size(data) < self.threshold:
            return False
        if self._worker is None or not self._worker.is_alive() or not can_use_background():
            warn_background_fallback("background worker not available")
            return False
        return True

    def _offload(self, data: Any) -> TResult:
        payload = self._to_payload(data)
        raw = self._worker.execute(payload, timeout=self.timeout)
        return self._adapter.validate_python(raw)

    def _execute(self, data: Any, is_current: Callable[[], bool]) -> Any:
        if self._should_offload(data):
            try:
                return self._offload(data)
            except Exception as e:
                if not is_current():
                    return _STALE
                logger.error(
                    f"Background {self.kind} calculation failed, falling back to sync: {e}",
                    exc_info=True,
                )

        try:
            return self._calculate(data)
        except Exception as e:
            logger.error(f"{self.kind} calculation error: {e}", exc_info=True)
            raise CalculationError(self.kind, str(e)) from e

    # =========================================================================
    # Debounced submission
    # =========================================================================

    def submit(self, data: Any) -> None:
        """Schedule a computation for new input, replacing any pending one.

        None clears the current result. Results for inputs replaced before
        they finish are discarded.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Dispatcher has been closed")
            self._cancel_timer()

            if data is None:
                self._latest = None
                self.result = None
                self.error = None
                self.is_calculating = False
                self._settled.set()
                return

            self._latest = data
            self._settled.clear()
            self._timer = threading.Timer(self.debounce_ms / 1000, self._run_submitted, args=(data,))
            self._timer.daemon = True
            self._timer.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the latest submitted input has a result or error."""
        return self._settled.wait(timeout)

    def close(self) -> None:
        """Cancel the pending debounce; in-flight results will be ignored."""
        with self._lock:
            self._closed = True
            self._cancel_timer()
            self._latest = None
            self.is_calculating = False
        self._settled.set()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _is_latest(self, data: Any) -> bool:
        with self._lock:
            return not self._closed and data is self._latest

    def _run_submitted(self, data: Any) -> None:
        with self._lock:
            if self._closed or data is not self._latest:
                return
            self.is_calculating = True

        try:
            result = self._execute(data, lambda: self._is_latest(data))
        except CalculationError as e:
            if self._is_latest(data):
                self._publish(error=e)
            return

        if result is _STALE or not self._is_latest(data):
            logger.debug(f"Discarding stale {self.kind} result")
            return
        self._publish(result=result)

    def _publish(self, result: Any = None, error: Optional[CalculationError] = None) -> None:
        with self._lock:
            self.result = result
            self.error = error
            self.is_calculating = False

        try:
            if error is not None:
                if self._on_error is not None:
                    self._on_error(error)
            elif self._on_result is not None:
                self._on_result(result)
        finally:
            self._settled.set()
