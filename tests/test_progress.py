"""Tests for progress reporters."""

import io
import threading

import numpy as np

from lumenpath.progress import NullProgress, TqdmProgress, PreviewProgress


class TestNullProgress:
    """Test the do-nothing reporter."""

    def test_accepts_every_call(self):
        progress = NullProgress()
        progress.set_length(10)
        progress.increment(1)
        progress.finish()

    def test_never_takes_snapshot(self):
        calls = []
        NullProgress().increment(1, lambda: calls.append(1))
        assert calls == []


class TestTqdmProgress:
    """Test the terminal progress bar."""

    def test_counts_passes(self):
        progress = TqdmProgress(file=io.StringIO())
        progress.set_length(4)
        for _ in range(3):
            progress.increment(1)

        assert progress._bar.total == 4
        assert progress._bar.n == 3
        progress.finish()

    def test_ignores_snapshot(self):
        calls = []
        progress = TqdmProgress(file=io.StringIO())
        progress.set_length(1)
        progress.increment(1, lambda: calls.append(1))
        progress.finish()
        assert calls == []


class TestPreviewProgress:
    """Test the preview-holding reporter."""

    def test_initial_state(self):
        progress = PreviewProgress()
        assert progress.current == 0
        assert progress.length == 0
        assert progress.finished is False
        assert progress.percentage() == 0.0
        assert progress.take_preview() is None

    def test_percentage(self):
        progress = PreviewProgress()
        progress.set_length(4)
        progress.increment(1)
        assert progress.percentage() == 0.25
        progress.increment(3)
        assert progress.percentage() == 1.0

    def test_finish(self):
        progress = PreviewProgress()
        progress.finish()
        assert progress.finished is True

    def test_keeps_latest_snapshot(self):
        progress = PreviewProgress()
        progress.set_length(2)
        first = np.zeros((2, 2, 4), dtype=np.uint8)
        second = np.ones((2, 2, 4), dtype=np.uint8)

        progress.increment(1, lambda: first)
        progress.increment(1, lambda: second)

        assert progress.take_preview() is second

    def test_take_preview_clears_slot(self):
        progress = PreviewProgress()
        image = np.zeros((1, 1, 4), dtype=np.uint8)
        progress.increment(1, lambda: image)

        assert progress.take_preview() is image
        assert progress.take_preview() is None

    def test_on_update_called_for_every_change(self):
        calls = []
        progress = PreviewProgress(on_update=lambda: calls.append(1))

        progress.set_length(2)
        progress.increment(1)
        progress.increment(1)
        progress.finish()

        assert len(calls) == 4

    def test_concurrent_increments(self):
        progress = PreviewProgress()
        progress.set_length(400)

        def work():
            for _ in range(100):
                progress.increment(1)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert progress.current == 400
        assert progress.percentage() == 1.0
