"""
Background render sessions.

The non-visual half of an interactive viewer: a RenderManager owns the
scene, runs one render at a time on a background thread, hands out live
preview images while it runs and cancels the running render before a new
one starts.
"""

from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

import numpy as np

from .camera import Camera
from .progress import PreviewProgress
from .renderer import Renderer, RenderParams
from .shapes import Hittable

logger = logging.getLogger(__name__)


@dataclass
class RenderJob:
    """Represents one render started by a RenderManager."""
    id: int
    params: RenderParams
    progress: PreviewProgress
    cancel: threading.Event = field(default_factory=threading.Event)
    status: str = 'pending'  # 'pending', 'running', 'completed', 'cancelled', 'error'
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    image: Optional[np.ndarray] = None
    preview: Optional[np.ndarray] = None
    error: Optional[str] = None
    thread: Optional[threading.Thread] = None

    @property
    def done(self) -> bool:
        return self.status in ('completed', 'cancelled', 'error')


class RenderManager:
    """Manages render jobs and state for one scene."""

    def __init__(
        self,
        world: Hittable,
        camera: Camera,
        params: RenderParams,
        on_update: Optional[Callable[[], None]] = None
    ):
        """Create a manager.

        Args:
            world: Scene shared read-only by every render
            camera: Camera used until replaced through `start_render`
            params: Render parameters used until replaced
            on_update: Called from worker threads whenever progress changes
        """
        self.world = world
        self.camera = camera
        self.params = params
        self.on_update = on_update
        self.current_job: Optional[RenderJob] = None
        self.last_image: Optional[np.ndarray] = None
        self.lock = threading.Lock()
        # Serializes start_render so cancel-then-start runs as one step
        self.start_lock = threading.Lock()
        self.job_counter = 0

    def start_render(self, camera: Optional[Camera] = None, **overrides: Any) -> RenderJob:
        """Start a new render, cancelling the one in flight first.

        Args:
            camera: Replacement camera (keeps the current one if None)
            **overrides: RenderParams fields to change, e.g. samples_per_pixel

        Returns:
            The new job
        """
        with self.start_lock:
            self.cancel_render(wait=True)

            with self.lock:
                if camera is not None:
                    self.camera = camera
                if overrides:
                    self.params = replace(self.params, **overrides)

                self.job_counter += 1
                job = RenderJob(
                    id=self.job_counter,
                    params=self.params,
                    progress=PreviewProgress(self.on_update)
                )
                job.thread = threading.Thread(
                    target=self._render_worker,
                    args=(job, self.camera),
                    name=f"render-{job.id}",
                    daemon=True
                )
                self.current_job = job
                job.thread.start()

        logger.info("Started render %d", job.id)
        return job

    def _render_worker(self, job: RenderJob, camera: Camera) -> None:
        """Worker thread for rendering."""
        job.status = 'running'
        try:
            image = Renderer(job.params).render(self.world, camera, job.progress, job.cancel)
        except Exception as e:
            logger.exception("Render %d failed", job.id)
            job.status = 'error'
            job.error = str(e)
        else:
            job.image = image
            if job.cancel.is_set():
                job.status = 'cancelled'
            else:
                job.status = 'completed'
                with self.lock:
                    self.last_image = image
        finally:
            job.end_time = time.time()

    def cancel_render(self, wait: bool = False) -> bool:
        """Cancel the current render job.

        Args:
            wait: Block until the worker thread has stopped

        Returns:
            True if a running job was asked to stop
        """
        with self.lock:
            job = self.current_job
        if job is None or job.done:
            return False

        logger.info("Cancelling render %d", job.id)
        job.cancel.set()
        if wait and job.thread is not None:
            job.thread.join()
        return True

    def wait(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        """Wait for the current job and return its image.

        The image of a cancelled job holds only the passes that finished.
        """
        with self.lock:
            job = self.current_job
        if job is None or job.thread is None:
            return None
        job.thread.join(timeout)
        return job.image

    def latest_image(self) -> Optional[np.ndarray]:
        """Image to display right now.

        The newest preview of the running job if there is one, otherwise
        the last completed render.
        """
        with self.lock:
            job = self.current_job
            fallback = self.last_image
        if job is not None and not job.done:
            preview = job.progress.take_preview()
            if preview is not None:
                job.preview = preview
            if job.preview is not None:
                return job.preview
        return fallback

    def get_status(self) -> Dict[str, Any]:
        """Get current render status."""
        with self.lock:
            job = self.current_job
        if job is None:
            return {'status': 'idle'}
        return {
            'id': job.id,
            'status': job.status,
            'progress': job.progress.percentage(),
            'start_time': job.start_time,
            'end_time': job.end_time,
            'error': job.error,
        }
