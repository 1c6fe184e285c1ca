"""Capture session state.

Holds what a live capture loop shares between the frame source, the
pipeline and the UI: the stop flag and the debug observers.
"""

import logging
import threading
from typing import Optional, Sequence

from src.common.observer import CompositeObserver, PipelineObserver

logger = logging.getLogger(__name__)


class CaptureSession:
    """One capture session.

    `stop()` may be called from any thread; the live loop checks the flag
    between frames.

    Args:
        observers: Debug observers notified by every stage.
    """

    def __init__(self, observers: Optional[Sequence[PipelineObserver]] = None):
        self._stop_event = threading.Event()
        self.observer = CompositeObserver(observers or [])
        self.frames_processed = 0

    def stop(self) -> None:
        if not self._stop_event.is_set():
            logger.info(f"Capture session stopped after {self.frames_processed} frame(s)")
        self._stop_event.set()

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def reset(self) -> None:
        """Clear the stop flag so the session can be reused."""
        self._stop_event.clear()
        self.frames_processed = 0
