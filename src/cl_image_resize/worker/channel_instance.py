import atexit
import threading

from ..common.settings import ResizeSettings, get_settings
from .channel import WorkerChannel

_channel: WorkerChannel | None = None
_channel_lock = threading.Lock()


def get_worker_channel(settings: ResizeSettings | None = None) -> WorkerChannel:
    """Get or create the process-wide worker channel.

    The channel is created lazily and bootstrapped on first use, so this is
    cheap to call. Settings only matter for the call that creates it.
    """
    global _channel
    with _channel_lock:
        if _channel is None:
            settings = settings or get_settings()
            _channel = WorkerChannel(probe_timeout=settings.probe_timeout)
        return _channel


def set_worker_channel(channel: WorkerChannel | None) -> WorkerChannel | None:
    """Replace the process-wide channel, returning the previous one."""
    global _channel
    with _channel_lock:
        previous = _channel
        _channel = channel
    return previous


def shutdown_worker_channel() -> None:
    """Close and forget the process-wide worker channel."""
    previous = set_worker_channel(None)
    if previous is not None:
        previous.close()


_ = atexit.register(shutdown_worker_channel)
