"""Background worker channel."""

from .channel import ChannelState, WorkerChannel
from .channel_instance import get_worker_channel, set_worker_channel, shutdown_worker_channel
from .messages import WorkerRequest, WorkerResponse
from .transport import ThreadWorkerTransport, WorkerTransport, handle_request

__all__ = [
    "ChannelState",
    "WorkerChannel",
    "WorkerRequest",
    "WorkerResponse",
    "ThreadWorkerTransport",
    "WorkerTransport",
    "handle_request",
    "get_worker_channel",
    "set_worker_channel",
    "shutdown_worker_channel",
]
