"""Background execution of analysis calculations on a worker thread.

An AnalysisWorker owns one long-lived daemon thread and a message channel to
it. Requests are serialized to JSON, correlated with replies through a map of
pending futures keyed by request id, and rejected in bulk when the worker is
terminated or its thread dies.
"""

import json
import logging
import queue
import sys
import threading
import traceback
import uuid
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from functools import cache
from typing import Any, Callable, Optional

from app.config import settings
from app.models.worker import WorkerErrorPayload, WorkerRequest, WorkerResponse
from app.services.analysis_worker import handle_message

logger = logging.getLogger(__name__)

# Sentinel telling the worker thread to exit
_STOP = object()

_warned_fallback = False


class WorkerError(Exception):
    """Error raised by, or on the channel to, the background worker."""

    def __init__(self, message: str, name: str = "WorkerError"):
        super().__init__(message)
        self.name = name


class WorkerTimeoutError(WorkerError):
    def __init__(self, message: str):
        super().__init__(message, name="WorkerTimeoutError")


class WorkerTerminatedError(WorkerError):
    def __init__(self, message: str = "Worker was terminated"):
        super().__init__(message, name="WorkerTerminatedError")


@cache
def can_use_background() -> bool:
    """Whether calculations may run on a background thread.

    Detected once per process: disabled by configuration or on platforms
    without thread support (WebAssembly builds).
    """
    if not settings.background_enabled:
        return False
    if sys.platform in ("emscripten", "wasi"):
        return False
    return True


def warn_background_fallback(reason: str) -> None:
    """Log the synchronous fallback once per process."""
    global _warned_fallback
    if _warned_fallback:
        return
    _warned_fallback = True
    logger.warning(
        f"Falling back to synchronous execution: {reason}. "
        "Large calculations will block the calling thread."
    )


def reset_fallback_warning() -> None:
    global _warned_fallback
    _warned_fallback = False


class AnalysisWorker:
    """Single background thread serving calculation requests.

    The thread is started lazily on the first request. Each request gets
    exactly one reply; replies for unknown ids (timed out or terminated
    requests) are ignored.
    """

    def __init__(
        self,
        handler: Callable[[dict[str, Any]], Any] = handle_message,
        name: str = "analysis-worker",
    ):
        self._handler = handler
        self._name = name
        self._inbox: queue.Queue = queue.Queue()
        self._pending: dict[str, Future] = {}
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._terminated = False

    def is_alive(self) -> bool:
        return not self._terminated

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def post(self, payload: dict[str, Any]) -> tuple[str, Future]:
        """Send a payload to the worker without waiting for the reply.

        Raises:
            WorkerTerminatedError: If the worker has been terminated
            TypeError: If the payload is not JSON serializable
        """
        request_id = uuid.uuid4().hex
        message = json.dumps(WorkerRequest(id=request_id, payload=payload).model_dump())
        future: Future = Future()

        with self._lock:
            if self._terminated:
                raise WorkerTerminatedError("Worker has been terminated")
            self._pending[request_id] = future
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()

        self._inbox.put(message)
        return request_id, future

    def execute(self, payload: dict[str, Any], timeout: Optional[float] = None) -> Any:
        """Send a payload and block until its result arrives.

        Raises:
            WorkerError: If the calculation failed inside the worker
            WorkerTimeoutError: If no reply arrived within timeout seconds
            WorkerTerminatedError: If the worker was terminated meanwhile
        """
        request_id, future = self.post(payload)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            with self._lock:
                self._pending.pop(request_id, None)
            raise WorkerTimeoutError(f"Worker request timed out after {timeout}s") from None

    def terminate(self, join_timeout: float = 1.0) -> None:
        """Stop the thread and reject every pending request."""
        with self._lock:
            if self._terminated:
                return
            self._terminated = True
            pending = list(self._pending.values())
            self._pending.clear()
            thread = self._thread
            self._thread = None

        for future in pending:
            future.set_exception(WorkerTerminatedError())

        if thread is not None:
            self._inbox.put(_STOP)
            thread.join(timeout=join_timeout)
        logger.info(f"Analysis worker '{self._name}' terminated ({len(pending)} pending rejected)")

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _run(self) -> None:
        try:
            while True:
                message = self._inbox.get()
                if message is _STOP:
                    return
                self._on_message(self._process(message))
        except Exception as exc:
            logger.error(f"Analysis worker crashed: {exc}", exc_info=True)
            with self._lock:
                pending = list(self._pending.values())
                self._pending.clear()
                self._thread = None
            for future in pending:
                future.set_exception(WorkerError(str(exc) or "Worker error"))

    def _process(self, message: str) -> str:
        request = WorkerRequest.model_validate_json(message)
        try:
            result = self._handler(request.payload)
            response = WorkerResponse(
                id=request.id,
                type=str(request.payload.get("kind", "result")),
                result=result,
            )
            return response.model_dump_json()
        except Exception as exc:
            error = WorkerErrorPayload(
                name=type(exc).__name__,
                message=str(exc),
                stack=traceback.format_exc(),
            )
            return WorkerResponse(id=request.id, type="error", error=error).model_dump_json()

    def _on_message(self, message: str) -> None:
        response = WorkerResponse.model_validate_json(message)
        with self._lock:
            future = self._pending.pop(response.id, None)

        if future is None:
            logger.debug(f"Ignoring reply for unknown request {response.id}")
            return

        if response.error is not None:
            future.set_exception(WorkerError(response.error.message, name=response.error.name))
        else:
            future.set_result(response.result)
