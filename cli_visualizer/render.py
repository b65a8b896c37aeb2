import logging
import time

from cli_visualizer.settings import FPS, QUIT_KEYS
from cli_visualizer.widgets import (
    band_count_for_width,
    compose_frame,
    is_too_small,
    too_small_notice,
)

logger = logging.getLogger(__name__)


class RenderLoop:
    """
    Draws the spectrum about FPS times a second until the user quits, the
    stream's duration has elapsed, or playback reports it has finished.

    `cancel` is the shared cancellation flag (a threading.Event); this loop
    is the only party that sets it. `finished` is an optional Event set by
    whoever watches playback.
    """

    def __init__(self, surface, analyzer, cancel, duration=None, finished=None,
                 frame_interval=1.0 / FPS, clock=time.monotonic, sleep=None):
        self.surface = surface
        self.analyzer = analyzer
        self.cancel = cancel
        self.duration = duration
        self.finished = finished
        self.frame_interval = frame_interval
        self.clock = clock
        # Waiting on the flag wakes the loop as soon as it is set
        self.sleep = sleep or cancel.wait
        self.frames = 0
        self.elapsed = 0.0

    def run(self):
        try:
            self.surface.enter()
            start = self.clock()
            deadline = start + self.frame_interval
            while not self._stop_requested():
                self.elapsed = self.clock() - start
                if self.duration is not None and self.elapsed >= self.duration:
                    break
                if self.finished is not None and self.finished.is_set():
                    break

                # Sleep only what is left of this frame's slot
                delay = deadline - self.clock()
                if delay > 0:
                    self.sleep(delay)
                deadline = max(deadline + self.frame_interval, self.clock())

                if self._stop_requested():
                    break
                self.surface.draw(self.frame(self.elapsed))
                self.frames += 1
        finally:
            self.surface.restore()
        logger.debug("Render loop stopped after %d frames (%.2fs)", self.frames, self.elapsed)

    def _stop_requested(self):
        if self.cancel.is_set():
            return True
        if self.surface.poll_key() in QUIT_KEYS:
            logger.info("Quit key pressed")
            self.cancel.set()
            return True
        return False

    def frame(self, elapsed):
        width, height = self.surface.size()
        if is_too_small(width, height):
            return too_small_notice(width, height)

        # Band count comes from the width first so analyzer and legend agree
        band_count = band_count_for_width(width)
        values = self.analyzer.process(band_count)
        return compose_frame(
            values,
            self.analyzer.edges[:-1],
            width,
            height,
            elapsed,
            self.duration,
            self.analyzer.sample_rate,
        )
