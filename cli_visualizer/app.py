import logging
import threading
from dataclasses import dataclass

from cli_visualizer.analyzer import SpectrumAnalyzer
from cli_visualizer.errors import PlaybackError
from cli_visualizer.render import RenderLoop
from cli_visualizer.settings import Settings
from cli_visualizer.stream import tap

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    cancelled: bool
    elapsed: float
    frames: int
    dropped_samples: int


def run_visualizer(stream, player=None, surface=None, settings=None):
    """
    Play `stream` while drawing its spectrum, and return once both playback
    and the display have stopped and the terminal has been restored.

    `player` needs play(stream), is_playing() and stop(); `surface` needs
    enter(), size(), poll_key(), draw(renderable) and restore(). Both
    default to the real audio device and terminal.
    """
    settings = settings or Settings()
    if player is None:
        try:
            from cli_visualizer.playback import SoundDevicePlayer
        except (ImportError, OSError) as e:
            # sounddevice raises OSError when the PortAudio library is missing
            raise PlaybackError(f"Audio output unavailable: {e}") from e

        player = SoundDevicePlayer(settings.blocksize, settings.device)
    if surface is None:
        from cli_visualizer.terminal import TerminalSurface

        surface = TerminalSurface()

    tapped, history = tap(stream, settings.window_size)
    analyzer = SpectrumAnalyzer(
        history,
        tapped.sample_rate,
        window_size=settings.window_size,
        smoothing=settings.smoothing,
        min_freq=settings.min_freq,
    )
    cancel = threading.Event()
    finished = threading.Event()
    loop = RenderLoop(
        surface,
        analyzer,
        cancel,
        duration=tapped.duration,
        finished=finished,
        frame_interval=settings.frame_interval,
    )

    # A device failure here is fatal before the terminal is touched
    player.play(tapped)

    errors = []

    def render():
        try:
            loop.run()
        except Exception as e:
            errors.append(e)

    render_thread = threading.Thread(target=render, name="render", daemon=True)
    render_thread.start()
    try:
        _monitor(player, render_thread, cancel, finished, errors, settings.monitor_interval)
    finally:
        render_thread.join()
        player.stop()

    if errors:
        raise errors[0]

    summary = RunSummary(
        cancelled=cancel.is_set(),
        elapsed=loop.elapsed,
        frames=loop.frames,
        dropped_samples=tapped.dropped,
    )
    logger.info(
        "Finished: %s after %.2fs, %d frames, %d samples skipped by the display",
        "cancelled" if summary.cancelled else "completed",
        summary.elapsed, summary.frames, summary.dropped_samples,
    )
    return summary


def _monitor(player, render_thread, cancel, finished, errors, interval):
    while True:
        try:
            if cancel.is_set():
                if player.is_playing():
                    logger.info("Cancelled, stopping playback")
                    player.stop()
            elif not player.is_playing():
                finished.set()

            if not render_thread.is_alive():
                if errors or cancel.is_set() or not player.is_playing():
                    return
            render_thread.join(interval)
        except KeyboardInterrupt:
            logger.info("Interrupted")
            cancel.set()
