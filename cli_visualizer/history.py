import threading

import numpy as np

from cli_visualizer.settings import HISTORY_FACTOR, WINDOW_SIZE


class SampleHistory:
    """
    Bounded buffer of the most recent samples, shared between the audio
    thread (writer) and the render thread (reader).

    Once more than HISTORY_FACTOR windows are held, the oldest window is
    dropped in a single slice delete instead of popping sample by sample.
    """

    def __init__(self, window_size=WINDOW_SIZE):
        self.window_size = window_size
        self.capacity = window_size * HISTORY_FACTOR
        self._samples = []
        self._lock = threading.Lock()

    def append(self, sample):
        """
        Add one sample. Never waits on the lock: if the reader holds it the
        sample is dropped so the audio thread is not delayed. Returns whether
        the sample was stored.
        """
        if not self._lock.acquire(blocking=False):
            return False
        try:
            self._samples.append(sample)
            if len(self._samples) > self.capacity:
                del self._samples[:self.window_size]
        finally:
            self._lock.release()
        return True

    def snapshot(self, window_size=None):
        """
        Latest `window_size` samples, oldest first, as a float32 array.
        Returns None until that many samples have been collected.
        """
        size = self.window_size if window_size is None else window_size
        with self._lock:
            if len(self._samples) < size:
                return None
            return np.array(self._samples[len(self._samples) - size:], dtype=np.float32)

    def __len__(self):
        with self._lock:
            return len(self._samples)
