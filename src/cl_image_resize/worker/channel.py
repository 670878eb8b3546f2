"""Lazily bootstrapped, correlated request/response channel to the worker."""

import asyncio
import itertools
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, InvalidStateError
from enum import StrEnum

from loguru import logger
from PIL import Image

from ..common.errors import ChannelBootstrapError, RenderError
from ..common.schemas import FitGeometry, ResizeOptions
from .messages import WorkerRequest, WorkerResponse
from .transport import ThreadWorkerTransport, WorkerTransport

DEFAULT_PROBE_TIMEOUT = 5.0


class ChannelState(StrEnum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    PERMANENTLY_FAILED = "permanently_failed"


class WorkerChannel:
    """Single background worker shared by every resize call.

    Lifecycle:
        UNINITIALIZED -> READY after the transport starts and answers a probe
        UNINITIALIZED -> PERMANENTLY_FAILED if spawning or probing fails
        READY -> PERMANENTLY_FAILED if the transport itself dies

    There is exactly one bootstrap attempt per channel. Concurrent first
    callers share it, and a failed channel is never respawned.

    Each request gets an id from a monotonically increasing counter and a
    one-shot future registered under that id. Responses complete the future
    with the same id; anything else is ignored.
    """

    def __init__(
        self,
        transport_factory: Callable[[], WorkerTransport] = ThreadWorkerTransport,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    ):
        self.transport_factory: Callable[[], WorkerTransport] = transport_factory
        self.probe_timeout: float = probe_timeout

        self._lock: threading.Lock = threading.Lock()
        self._state: ChannelState = ChannelState.UNINITIALIZED
        self._error: BaseException | None = None
        self._transport: WorkerTransport | None = None
        self._bootstrap: Future[None] | None = None
        self._pending: dict[int, Future[WorkerResponse]] = {}
        self._ids: Iterator[int] = itertools.count(1)

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def failed(self) -> bool:
        return self._state == ChannelState.PERMANENTLY_FAILED

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    async def ensure_ready(self) -> None:
        """Spawn and probe the worker once; later calls reuse the outcome.

        Raises:
            ChannelBootstrapError: If the channel is, or just became,
                permanently failed
        """
        with self._lock:
            if self._state == ChannelState.READY:
                return
            if self._state == ChannelState.PERMANENTLY_FAILED:
                raise ChannelBootstrapError("Worker is not loaded", cause=self._error)
            owner = self._bootstrap is None
            if owner:
                self._bootstrap = Future()
            bootstrap = self._bootstrap
            assert bootstrap is not None

        if owner:
            await self._run_bootstrap(bootstrap)

        await asyncio.wrap_future(bootstrap)

    async def _run_bootstrap(self, bootstrap: Future[None]) -> None:
        probe_id = self.next_id()
        probe: Future[WorkerResponse] = Future()

        try:
            transport = self.transport_factory()
            with self._lock:
                self._transport = transport
                self._pending[probe_id] = probe
            transport.start(self._on_message, self._on_transport_error)
            transport.post(WorkerRequest.make_probe(probe_id))
            logger.debug(f"Posted worker probe {probe_id}")
            _ = await asyncio.wait_for(asyncio.wrap_future(probe), timeout=self.probe_timeout)
        except (Exception, asyncio.CancelledError) as e:
            reason = "timed out" if isinstance(e, TimeoutError) else str(e) or type(e).__name__
            logger.error(f"Worker bootstrap failed, using direct rendering from now on: {reason}")
            self._fail(e)
            bootstrap.set_exception(ChannelBootstrapError(f"Worker bootstrap failed: {reason}", cause=e))
            if isinstance(e, asyncio.CancelledError):
                raise
            return
        finally:
            with self._lock:
                _ = self._pending.pop(probe_id, None)

        with self._lock:
            if self._state == ChannelState.UNINITIALIZED:
                self._state = ChannelState.READY
            ready = self._state == ChannelState.READY

        if ready:
            logger.info("Worker channel ready")
            bootstrap.set_result(None)
        else:
            bootstrap.set_exception(ChannelBootstrapError("Worker failed during bootstrap", cause=self._error))

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        image: Image.Image,
        geometry: FitGeometry,
        options: ResizeOptions,
    ) -> WorkerResponse:
        """Send one render request and wait for its response.

        Raises:
            ChannelBootstrapError: If the worker cannot be (or was never) started
            RenderError: If the transport fails or the worker reports an error
        """
        await self.ensure_ready()

        request_id = self.next_id()
        future: Future[WorkerResponse] = Future()

        with self._lock:
            transport = self._transport
            if self._state != ChannelState.READY or transport is None:
                raise RenderError("Worker channel is not ready", request_id=request_id)
            self._pending[request_id] = future

        try:
            transport.post(WorkerRequest(id=request_id, image=image, geometry=geometry, options=options))
            response = await asyncio.wrap_future(future)
        finally:
            with self._lock:
                _ = self._pending.pop(request_id, None)

        if response.error is not None:
            raise RenderError(response.error, request_id=request_id)
        return response

    # ------------------------------------------------------------------
    # Transport callbacks (called from the worker side)
    # ------------------------------------------------------------------

    def _on_message(self, response: WorkerResponse) -> None:
        with self._lock:
            future = self._pending.pop(response.id, None)

        if future is None:
            logger.debug(f"Ignoring unmatched worker response {response.id}")
            return

        try:
            future.set_result(response)
        except InvalidStateError:
            # Caller stopped waiting
            logger.debug(f"Dropping response {response.id} for a cancelled request")

    def _on_transport_error(self, error: BaseException) -> None:
        logger.error(f"Worker transport failed: {error}")
        self._fail(error)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _fail(self, error: BaseException) -> None:
        with self._lock:
            if self._state == ChannelState.PERMANENTLY_FAILED:
                return
            self._state = ChannelState.PERMANENTLY_FAILED
            self._error = error
            pending = self._pending
            self._pending = {}
            transport = self._transport
            self._transport = None

        for request_id, future in pending.items():
            try:
                future.set_exception(RenderError(f"Worker channel failed: {error}", request_id=request_id))
            except InvalidStateError:
                pass

        if transport is not None:
            try:
                transport.close()
            except Exception as e:
                logger.warning(f"Error closing worker transport: {e}")

    def close(self) -> None:
        """Tear down the worker; the channel cannot be used afterwards."""
        self._fail(RenderError("Worker channel closed"))
        logger.info("Worker channel closed")
