import logging

from cli_visualizer.history import SampleHistory
from cli_visualizer.settings import WINDOW_SIZE

logger = logging.getLogger(__name__)


def format_time(seconds):
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class AudioStream:
    """A decoded, finite sequence of mono float samples plus its metadata."""

    def __init__(self, samples, sample_rate, channels=1, duration=None, source_channels=None):
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        if channels <= 0:
            raise ValueError(f"channel count must be positive, got {channels}")
        self.samples = samples
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.duration = duration
        self.source_channels = source_channels or channels

    def __iter__(self):
        return iter(self.samples)

    def describe(self):
        duration = "unknown" if self.duration is None else f"{self.duration:.2f} seconds"
        return (
            f"Sample Rate: {self.sample_rate} Hz\n"
            f"Channels: {self.source_channels}\n"
            f"Duration: {duration}"
        )


class SampleTap:
    """
    Iterator that forwards every sample of the wrapped stream unchanged and
    copies it into a SampleHistory on the way through.
    """

    def __init__(self, stream, history, sample_rate=None):
        self._source = iter(stream)
        self.history = history
        self.channels = stream.channels
        self.duration = stream.duration
        # Overridden when the stream was resampled before being wrapped
        self.sample_rate = sample_rate or stream.sample_rate
        self.dropped = 0

    def __iter__(self):
        return self

    def __next__(self):
        sample = next(self._source)
        if not self.history.append(sample):
            self.dropped += 1
        return sample


def tap(stream, window_size=WINDOW_SIZE, sample_rate=None):
    """Wrap `stream`, returning the tapped stream and the history it feeds."""
    history = SampleHistory(window_size)
    tapped = SampleTap(stream, history, sample_rate=sample_rate)
    logger.debug(
        "Tapping stream: %d Hz, %d channel(s), window %d",
        tapped.sample_rate, tapped.channels, window_size,
    )
    return tapped, history
