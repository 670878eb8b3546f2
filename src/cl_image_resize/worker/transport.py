"""Transport to the background execution context.

The default transport is a single daemon thread consuming an inbox queue.
Pillow releases the GIL while resampling and encoding, so rendering there
keeps the caller's event loop responsive.
"""

import queue
import threading
from collections.abc import Callable
from typing import Protocol

from loguru import logger
from typing_extensions import override

from ..algo.render import render_to_bytes
from ..common.errors import RenderError
from .messages import WorkerRequest, WorkerResponse

MessageHandler = Callable[[WorkerResponse], None]
ErrorHandler = Callable[[BaseException], None]

WORKER_THREAD_NAME = "cl-image-resize-worker"


class WorkerTransport(Protocol):
    """Bidirectional message channel to a background context."""

    def start(self, on_message: MessageHandler, on_error: ErrorHandler) -> None: ...

    def post(self, request: WorkerRequest) -> None: ...

    def close(self) -> None: ...


def handle_request(request: WorkerRequest) -> WorkerResponse:
    """Worker-side message handler.

    Probes are echoed back empty. Render failures are reported in the
    response rather than raised, so one bad request never kills the worker.
    """
    if request.probe:
        return WorkerResponse(id=request.id)

    assert request.image is not None and request.geometry is not None and request.options is not None
    try:
        encoded = render_to_bytes(request.image, request.geometry, request.options)
    except Exception as e:
        return WorkerResponse(id=request.id, error=str(e) or type(e).__name__)
    return WorkerResponse(id=request.id, result=encoded.data, smoothing=encoded.smoothing)


class _Stop:
    pass


class ThreadWorkerTransport(WorkerTransport):
    """Runs ``handle_request`` on a dedicated daemon thread."""

    def __init__(self, name: str = WORKER_THREAD_NAME):
        self.name: str = name
        self._inbox: queue.Queue[WorkerRequest | _Stop] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._closed: bool = False
        self._on_message: MessageHandler | None = None
        self._on_error: ErrorHandler | None = None

    @override
    def start(self, on_message: MessageHandler, on_error: ErrorHandler) -> None:
        if self._thread is not None:
            raise RuntimeError("Worker transport already started")
        self._on_message = on_message
        self._on_error = on_error
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Started worker thread {self.name}")

    @override
    def post(self, request: WorkerRequest) -> None:
        if self._closed or self._thread is None:
            raise RenderError("Worker transport is not running", request_id=request.id)
        self._inbox.put(request)

    @override
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._inbox.put(_Stop())
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug(f"Closed worker thread {self.name}")

    def _run(self) -> None:
        assert self._on_message is not None and self._on_error is not None
        try:
            while True:
                request = self._inbox.get()
                if isinstance(request, _Stop):
                    return
                self._on_message(handle_request(request))
        except Exception as e:
            logger.exception(f"Worker thread {self.name} crashed")
            self._closed = True
            self._on_error(e)
