# Terminal spectrum visualizer
# Requires: numpy, sounddevice, rich, librosa

from cli_visualizer.analyzer import FrequencyBand, SpectrumAnalyzer
from cli_visualizer.app import run_visualizer
from cli_visualizer.colors import band_color
from cli_visualizer.history import SampleHistory
from cli_visualizer.settings import Settings
from cli_visualizer.stream import AudioStream, SampleTap, tap

__version__ = "0.1.0"

__all__ = [
    "AudioStream",
    "FrequencyBand",
    "SampleHistory",
    "SampleTap",
    "Settings",
    "SpectrumAnalyzer",
    "band_color",
    "run_visualizer",
    "tap",
]
