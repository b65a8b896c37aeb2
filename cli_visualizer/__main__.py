import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from cli_visualizer.errors import VisualizerError
from cli_visualizer.settings import BLOCKSIZE, FPS, SMOOTHING, WINDOW_SIZE, Settings

console = Console(stderr=True)
logger = logging.getLogger("cli_visualizer")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="cli-visualizer",
        description="Play an audio file with a live frequency spectrum in the terminal.",
    )
    parser.add_argument("input", help="Path to the audio file (WAV)")
    parser.add_argument("--window-size", type=int, default=WINDOW_SIZE,
                        help="FFT window in samples (power of two)")
    parser.add_argument("--smoothing", type=float, default=SMOOTHING,
                        help="Weight of the newest frame, 0-1")
    parser.add_argument("--fps", type=int, default=FPS, help="Frames per second")
    parser.add_argument("--blocksize", type=int, default=BLOCKSIZE,
                        help="Frames per audio callback")
    parser.add_argument("--device", default=None,
                        help="Output device index or name (default: system default)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More logging (-v info, -vv debug)")
    parser.add_argument("--log-file", help="Write log records to this file instead of stderr")
    return parser.parse_args(argv)


def setup_logging(verbosity, log_file=None):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler = RichHandler(console=console, show_path=False)
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return handler


def _device(value):
    if value is not None and value.isdigit():
        return int(value)
    return value


def main(argv=None):
    args = parse_args(argv)
    handler = setup_logging(args.verbose, args.log_file)

    from cli_visualizer.app import run_visualizer
    from cli_visualizer.decoder import load_audio
    from cli_visualizer.terminal import HoldWhileFullScreen, TerminalSurface

    surface = TerminalSurface()
    hold = None
    if not args.log_file:
        # Records logged to stderr while the display is up wait until it is gone
        hold = HoldWhileFullScreen(surface)
        handler.addFilter(hold)

    try:
        settings = Settings(
            window_size=args.window_size,
            smoothing=args.smoothing,
            fps=args.fps,
            blocksize=args.blocksize,
            device=_device(args.device),
        )
        stream = load_audio(args.input)
        console.print("[bold green]Audio loaded!")
        console.print(stream.describe(), highlight=False)
        summary = run_visualizer(stream, surface=surface, settings=settings)
    except VisualizerError as e:
        console.print(f"[bold red]Error:[/] {e}", highlight=False, soft_wrap=True)
        return 1
    except KeyboardInterrupt:
        console.print("[bold yellow]Interrupted.")
        return 130
    except Exception as e:
        logger.debug("Visualizer failed", exc_info=True)
        console.print(f"[bold red]Error:[/] {type(e).__name__}: {e}", highlight=False, soft_wrap=True)
        return 1
    finally:
        if hold is not None:
            handler.removeFilter(hold)
            hold.release(handler)

    if summary.cancelled:
        console.print("[bold green]Visualizer stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
