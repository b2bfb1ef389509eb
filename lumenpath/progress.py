"""
Progress reporting for long renders.

The renderer reports at sample-pass granularity through the small
ProgressReporter interface and knows nothing about who is listening:
a terminal progress bar, a live preview, or nobody at all.
"""

from __future__ import annotations
import threading
from typing import Callable, Optional, Protocol

import numpy as np
from tqdm import tqdm

SnapshotProvider = Callable[[], np.ndarray]


class ProgressReporter(Protocol):
    """Receives progress updates from a render."""

    def set_length(self, total: int) -> None:
        """Announce how many units the render consists of."""
        ...

    def increment(self, delta: int, snapshot: Optional[SnapshotProvider] = None) -> None:
        """Report `delta` finished units.

        `snapshot` returns the current normalized RGBA8 image when called;
        reporters that do not show previews should not call it.
        """
        ...

    def finish(self) -> None:
        """Called once when the render loop ends, finished or cancelled."""
        ...


class NullProgress:
    """Discards all progress updates."""

    def set_length(self, total: int) -> None:
        pass

    def increment(self, delta: int, snapshot: Optional[SnapshotProvider] = None) -> None:
        pass

    def finish(self) -> None:
        pass


class TqdmProgress:
    """Terminal progress bar counting finished sample passes."""

    def __init__(self, desc: str = "Rendering", **tqdm_kwargs):
        self._bar = tqdm(total=0, desc=desc, unit="spp", **tqdm_kwargs)

    def set_length(self, total: int) -> None:
        self._bar.reset(total=total)

    def increment(self, delta: int, snapshot: Optional[SnapshotProvider] = None) -> None:
        self._bar.update(delta)

    def finish(self) -> None:
        self._bar.close()


class PreviewProgress:
    """Progress counters plus the latest preview image.

    Written by render worker threads and read by a UI thread. The preview
    slot holds only the most recent snapshot; `take_preview` empties it so
    the reader only redraws when something changed.
    """

    def __init__(self, on_update: Optional[Callable[[], None]] = None):
        """Create the reporter.

        Args:
            on_update: Called after every change, e.g. to wake a UI loop
        """
        self._lock = threading.Lock()
        self._preview_lock = threading.Lock()
        self._current = 0
        self._length = 0
        self._finished = False
        self._preview: Optional[np.ndarray] = None
        self._on_update = on_update

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    @property
    def length(self) -> int:
        with self._lock:
            return self._length

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._finished

    def percentage(self) -> float:
        """Fraction of units finished, 0.0 before the length is known."""
        with self._lock:
            if self._length == 0:
                return 0.0
            return self._current / self._length

    def set_length(self, total: int) -> None:
        with self._lock:
            self._length = total
        self._notify()

    def increment(self, delta: int, snapshot: Optional[SnapshotProvider] = None) -> None:
        with self._lock:
            self._current += delta
        if snapshot is not None:
            image = snapshot()
            with self._preview_lock:
                self._preview = image
        self._notify()

    def finish(self) -> None:
        with self._lock:
            self._finished = True
        self._notify()

    def take_preview(self) -> Optional[np.ndarray]:
        """Return the newest preview image and clear the slot."""
        with self._preview_lock:
            image, self._preview = self._preview, None
        return image

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update()
