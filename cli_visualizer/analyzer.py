import logging
import math
from dataclasses import dataclass

import numpy as np

from cli_visualizer.settings import MIN_FREQ, SMOOTHING, WINDOW_SIZE

logger = logging.getLogger(__name__)


@dataclass
class FrequencyBand:
    index: int
    low_freq: float
    high_freq: float
    first_bin: int = None  # inclusive, None when no FFT bin falls inside
    last_bin: int = None
    magnitude: float = 0.0
    smoothed: float = 0.0


def band_edges(sample_rate, band_count, min_freq=MIN_FREQ):
    """
    Boundaries of `band_count` bands spread evenly in log-frequency between
    `min_freq` and the Nyquist frequency. Returns band_count + 1 values.
    """
    nyquist = sample_rate / 2
    if nyquist <= min_freq:
        raise ValueError(f"Nyquist frequency {nyquist} Hz is below {min_freq} Hz")
    band_count = max(1, int(band_count))
    log_min = math.log(min_freq)
    log_max = math.log(nyquist)
    return np.exp(np.linspace(log_min, log_max, band_count + 1))


def _resized(values, size):
    # Keep existing entries, zero-fill new ones
    out = np.zeros(size)
    keep = min(size, len(values))
    out[:keep] = values[:keep]
    return out


class SpectrumAnalyzer:
    """
    Turns the latest window of the shared history into N log-spaced,
    smoothed band levels on a 0-100 scale.
    """

    def __init__(self, history, sample_rate, window_size=WINDOW_SIZE,
                 smoothing=SMOOTHING, min_freq=MIN_FREQ):
        self.history = history
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.smoothing = smoothing
        self.min_freq = min_freq

        # Only the first half of the bins carries information for real input
        self.bin_freqs = np.arange(window_size // 2) * sample_rate / window_size

        self.band_count = 0
        self.edges = np.zeros(0)
        self.raw = np.zeros(0)
        self.smoothed = np.zeros(0)
        self._band_bins = []
        self._boost = np.zeros(0)

    def resize(self, band_count):
        """Switch to a new band count. Returns True if the layout changed."""
        band_count = max(1, int(band_count))
        if band_count == self.band_count:
            return False

        logger.debug("Band count %d -> %d", self.band_count, band_count)
        self.raw = _resized(self.raw, band_count)
        self.smoothed = _resized(self.smoothed, band_count)
        self.edges = band_edges(self.sample_rate, band_count, self.min_freq)
        self._band_bins = [
            np.flatnonzero((self.bin_freqs >= low) & (self.bin_freqs < high))
            for low, high in zip(self.edges[:-1], self.edges[1:])
        ]
        # High frequencies carry less energy in most material
        self._boost = 1 + 2 * np.arange(band_count) / band_count
        self.band_count = band_count
        return True

    def magnitudes(self, window):
        spectrum = np.fft.fft(window.astype(np.complex128), n=self.window_size)
        return np.abs(spectrum[:self.window_size // 2])

    def update(self):
        """
        Fold the newest window into the smoothed levels. Returns False, leaving
        the levels untouched, while the history is still filling up.
        """
        window = self.history.snapshot(self.window_size)
        if window is None:
            return False

        mags = self.magnitudes(window)
        alpha = self.smoothing
        for i, bins in enumerate(self._band_bins):
            if bins.size == 0:
                continue
            self.raw[i] = mags[bins].mean() * self._boost[i]
            self.smoothed[i] = self.smoothed[i] * (1 - alpha) + self.raw[i] * alpha
        return True

    def normalized(self):
        peak = max(float(self.smoothed.max(initial=0.0)), 1.0)
        return np.clip(self.smoothed / peak * 100, 0, 100)

    def process(self, band_count):
        self.resize(band_count)
        self.update()
        return self.normalized()

    def bands(self):
        result = []
        for i, bins in enumerate(self._band_bins):
            band = FrequencyBand(
                index=i,
                low_freq=float(self.edges[i]),
                high_freq=float(self.edges[i + 1]),
                magnitude=float(self.raw[i]),
                smoothed=float(self.smoothed[i]),
            )
            if bins.size:
                band.first_bin = int(bins[0])
                band.last_bin = int(bins[-1])
            result.append(band)
        return result
