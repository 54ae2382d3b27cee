import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

from ..errors import DispatcherClosed
from ..models import EngineDescription, EngineDirectory, EngineRef, EngineVariant, GameMoveResponse
from .client import EngineClient

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Reply(Generic[T]):
    """Single-use channel carrying one RequestResult from the dispatcher."""

    def __init__(self) -> None:
        self._slot: queue.Queue = queue.Queue(maxsize=1)
        self._taken = False

    def send(self, result: RequestResult[T]) -> None:
        try:
            self._slot.put_nowait(result)
        except queue.Full:
            raise RuntimeError("reply already sent") from None

    def try_take(self) -> Optional[RequestResult[T]]:
        """Return the result if it has arrived, without blocking."""
        if self._taken:
            raise RuntimeError("reply already taken")
        try:
            result = self._slot.get_nowait()
        except queue.Empty:
            return None
        self._taken = True
        return result

    def wait(self, timeout: Optional[float] = None) -> RequestResult[T]:
        if self._taken:
            raise RuntimeError("reply already taken")
        result = self._slot.get(timeout=timeout)
        self._taken = True
        return result


@dataclass
class FetchEngines:
    reply: Reply[EngineDirectory] = field(default_factory=Reply)


@dataclass
class FetchEngineDescription:
    engine_ref: EngineRef
    reply: Reply[EngineDescription] = field(default_factory=Reply)


@dataclass
class FetchPositionEvaluation:
    variant: EngineVariant
    fen: str
    reply: Reply[GameMoveResponse] = field(default_factory=Reply)


Request = Union[FetchEngines, FetchEngineDescription, FetchPositionEvaluation]

_STOP = object()


class RequestDispatcher:
    """Runs engine API calls on a worker thread, one at a time, in submission order.

    Callers never block: ``submit`` only enqueues, and the answer arrives on the
    request's own ``Reply``. A failed call is delivered as a ``RequestResult``
    with ``error`` set; the worker keeps serving the next request.
    """

    def __init__(self, client: Optional[EngineClient] = None) -> None:
        self.client = client or EngineClient()
        self._requests: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "RequestDispatcher":
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="request-dispatcher", daemon=True)
            self._thread.start()
        return self

    def submit(self, request: Request) -> Reply:
        if self._closed:
            raise DispatcherClosed("request dispatcher is closed")
        self._requests.put(request)
        return request.reply

    def fetch_engines(self) -> Reply[EngineDirectory]:
        return self.submit(FetchEngines())

    def fetch_engine_description(self, engine_ref: EngineRef) -> Reply[EngineDescription]:
        return self.submit(FetchEngineDescription(engine_ref))

    def fetch_move(self, variant: EngineVariant, fen: str) -> Reply[GameMoveResponse]:
        return self.submit(FetchPositionEvaluation(variant, fen))

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Stop accepting requests; the worker finishes what is queued, then exits."""
        if self._closed:
            return
        self._closed = True
        self._requests.put(_STOP)
        if self._thread is None:
            self.client.close()
            return
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            # still inside a call; the worker closes the client when it exits
            log.warning("Request dispatcher did not stop within %s seconds", timeout)
            return
        self._thread = None

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            if request is _STOP:
                self.client.close()
                break
            log.debug("Received request: %r", request)
            result = self._handle(request)
            if result.ok:
                log.info("Request %s succeeded", type(request).__name__)
            else:
                log.info("Request %s failed: %s", type(request).__name__, result.error)
            request.reply.send(result)

    def _handle(self, request: Request) -> RequestResult[Any]:
        try:
            if isinstance(request, FetchEngines):
                return RequestResult(value=self.client.get_engines())
            if isinstance(request, FetchEngineDescription):
                return RequestResult(value=self.client.get_engine_description(request.engine_ref))
            if isinstance(request, FetchPositionEvaluation):
                return RequestResult(value=self.client.get_position_evaluation(request.variant, request.fen))
            raise TypeError(f"unknown request {request!r}")
        except Exception as e:
            return RequestResult(error=e)
