import logging
import os

import librosa
import numpy as np

from cli_visualizer.errors import DecodeError
from cli_visualizer.stream import AudioStream

logger = logging.getLogger(__name__)


def load_audio(path):
    """Decode `path` at its native rate and fold it down to mono."""
    if not os.path.exists(path):
        raise DecodeError(f"Input file not found: {path}")
    try:
        audio, sample_rate = librosa.load(path, sr=None, mono=False)
    except Exception as e:
        raise DecodeError(f"Failed to load audio file {path}: {e}") from e

    source_channels = 1 if audio.ndim == 1 else audio.shape[0]
    mono = librosa.to_mono(audio).astype(np.float32)
    if mono.size == 0:
        raise DecodeError(f"No audio in {path}")

    stream = AudioStream(
        mono,
        sample_rate,
        channels=1,
        duration=mono.size / sample_rate,
        source_channels=source_channels,
    )
    logger.info(
        "Loaded %s: %d Hz, %d channel(s), %.2fs",
        path, sample_rate, source_channels, stream.duration,
    )
    return stream
