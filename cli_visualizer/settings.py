# Visualizer settings

from dataclasses import dataclass

from cli_visualizer.errors import ConfigError

# Analysis
WINDOW_SIZE = 1024        # Samples per FFT window
HISTORY_FACTOR = 2        # History is trimmed once it holds this many windows
SMOOTHING = 0.3           # EMA weight of the newest frame
MIN_FREQ = 20.0           # Lowest displayed frequency (Hz)

# Display
FPS = 60
BAR_WIDTH = 2             # Columns per bar
BAR_GAP = 1               # Blank columns between bars
MIN_DISPLAY_WIDTH = 36    # Bar area never narrower than this
MAX_DISPLAY_WIDTH = 150   # ... nor wider than this
MAX_BAR_ROWS = 24         # Taller terminals leave blank rows below the bars
MIN_TERMINAL_WIDTH = 40
MIN_TERMINAL_HEIGHT = 12
MIN_LEGEND_SEGMENTS = 8
MAX_LEGEND_SEGMENTS = 16

# Playback
BLOCKSIZE = 1024          # Frames handed to the audio device per callback
MONITOR_INTERVAL = 0.1    # Seconds between playback checks

QUIT_KEYS = ("q", "Q", "\x03")  # q or Ctrl+C


@dataclass(frozen=True)
class Settings:
    window_size: int = WINDOW_SIZE
    smoothing: float = SMOOTHING
    min_freq: float = MIN_FREQ
    fps: int = FPS
    blocksize: int = BLOCKSIZE
    device: object = None
    monitor_interval: float = MONITOR_INTERVAL

    def __post_init__(self):
        size = self.window_size
        if size < 64 or size & (size - 1):
            raise ConfigError(f"window size must be a power of two >= 64, got {size}")
        if not 0.0 < self.smoothing <= 1.0:
            raise ConfigError(f"smoothing must be in (0, 1], got {self.smoothing}")
        if self.fps <= 0:
            raise ConfigError(f"fps must be positive, got {self.fps}")
        if self.blocksize <= 0:
            raise ConfigError(f"blocksize must be positive, got {self.blocksize}")
        if self.min_freq <= 0:
            raise ConfigError(f"min frequency must be positive, got {self.min_freq}")

    @property
    def frame_interval(self):
        return 1.0 / self.fps
