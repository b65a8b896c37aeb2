import itertools
import logging
import threading

import numpy as np
import sounddevice as sd

from cli_visualizer.errors import PlaybackError
from cli_visualizer.settings import BLOCKSIZE

logger = logging.getLogger(__name__)


class SoundDevicePlayer:
    """Plays a sample stream on the default (or given) output device."""

    def __init__(self, blocksize=BLOCKSIZE, device=None):
        self.blocksize = blocksize
        self.device = device
        self.stream = None
        self._finished = threading.Event()
        self._finished.set()

    def play(self, source):
        """Start playback and return immediately; audio is pulled from `source`
        on the PortAudio callback thread."""
        samples = iter(source)
        channels = source.channels

        def audio_callback(outdata, frames, time, status):
            if status:
                logger.warning("Audio output status: %s", status)
            block = np.fromiter(itertools.islice(samples, frames * channels), dtype=np.float32)
            count = len(block) // channels
            outdata[:count] = block[:count * channels].reshape(count, channels)
            if count < frames:
                outdata[count:] = 0
                raise sd.CallbackStop

        self._finished.clear()
        try:
            self.stream = sd.OutputStream(
                samplerate=source.sample_rate,
                channels=channels,
                blocksize=self.blocksize,
                device=self.device,
                dtype="float32",
                callback=audio_callback,
                finished_callback=self._finished.set,
            )
            self.stream.start()
        except (sd.PortAudioError, ValueError) as e:
            self._finished.set()
            self.stream = None
            raise PlaybackError(f"Failed to start audio stream: {e}") from e
        logger.info("Playback started at %d Hz, %d channel(s)", source.sample_rate, channels)

    def is_playing(self):
        return not self._finished.is_set()

    def stop(self):
        """Stop immediately, dropping whatever is still buffered. Safe to call twice."""
        stream, self.stream = self.stream, None
        if stream is not None:
            stream.abort()
            stream.close()
            logger.info("Playback stopped")
        self._finished.set()
