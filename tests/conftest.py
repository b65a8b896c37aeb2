import itertools
import threading
import time

import pytest


class FakeSurface:
    """In-memory stand-in for the terminal: scripted sizes and keys, recorded frames."""

    def __init__(self, sizes=((100, 30),), keys=(), fail_on_draw=None, fail_on_enter=None):
        self.sizes = list(sizes)
        self.keys = list(keys)
        self.fail_on_draw = fail_on_draw
        self.fail_on_enter = fail_on_enter
        self.entered = 0
        self.restored = 0
        self.frames = []

    def enter(self):
        self.entered += 1
        if self.fail_on_enter is not None:
            raise self.fail_on_enter

    def size(self):
        if len(self.sizes) > 1:
            return self.sizes.pop(0)
        return self.sizes[0]

    def poll_key(self):
        if self.keys:
            return self.keys.pop(0)
        return None

    def draw(self, renderable):
        if self.fail_on_draw is not None:
            raise self.fail_on_draw
        self.frames.append(renderable)

    def restore(self):
        self.restored += 1


class PacedPlayer:
    """Consumes a stream at its real sample rate on a background thread."""

    def __init__(self, blocksize=1024):
        self.blocksize = blocksize
        self.played = 0
        self.stopped = 0
        self._stop = threading.Event()
        self._thread = None

    def play(self, source):
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._drain, args=(iter(source), source.sample_rate), daemon=True
        )
        self._thread.start()

    def _drain(self, samples, rate):
        start = time.monotonic()
        while not self._stop.is_set():
            block = list(itertools.islice(samples, self.blocksize))
            if not block:
                break
            self.played += len(block)
            delay = start + self.played / rate - time.monotonic()
            if delay > 0:
                self._stop.wait(delay)

    def is_playing(self):
        return self._thread is not None and self._thread.is_alive()

    def stop(self):
        self.stopped += 1
        self._stop.set()
        if self._thread is not None:
            self._thread.join()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def player():
    return PacedPlayer()
