import logging
import os
import select
import sys
import termios
import tty

from rich.console import Console
from rich.live import Live

from cli_visualizer.errors import TerminalError

logger = logging.getLogger(__name__)


class KeyCapture:
    """
    Puts a POSIX terminal into character-at-a-time mode with echo and signal
    keys disabled, so Ctrl+C arrives as "\\x03" and can be polled like any
    other key. Does nothing when the input is not a TTY.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._saved = None

    @property
    def active(self):
        return self._saved is not None

    def start(self):
        if self.active or not self.stream.isatty():
            return
        fd = self.stream.fileno()
        try:
            self._saved = termios.tcgetattr(fd)
            mode = termios.tcgetattr(fd)
            mode[tty.LFLAG] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
            mode[tty.CC][termios.VMIN] = 1
            mode[tty.CC][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSAFLUSH, mode)
        except termios.error as e:
            self._saved = None
            raise TerminalError(f"Cannot capture keyboard input: {e}") from e

    def poll(self):
        """Return one pending key, or None without waiting."""
        if not self.active:
            return None
        fd = self.stream.fileno()
        ready, _, _ = select.select([fd], [], [], 0)
        if not ready:
            return None
        return os.read(fd, 1).decode(errors="ignore") or None

    def stop(self):
        if not self.active:
            return
        saved, self._saved = self._saved, None
        termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, saved)


class TerminalSurface:
    """Full-screen rich display plus keyboard capture."""

    def __init__(self, console=None, keys=None):
        self.console = console or Console()
        self.keys = keys or KeyCapture()
        self._live = None

    @property
    def active(self):
        return self._live is not None

    def size(self):
        size = self.console.size
        return size.width, size.height

    def enter(self):
        if not self.console.is_terminal:
            raise TerminalError("Standard output is not a terminal")
        self._live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        try:
            self._live.start()
        except OSError as e:
            raise TerminalError(f"Cannot enter full-screen mode: {e}") from e
        self.keys.start()

    def poll_key(self):
        return self.keys.poll()

    def draw(self, renderable):
        self._live.update(renderable, refresh=True)

    def restore(self):
        """Leave full-screen mode and give the terminal its old settings back."""
        live, self._live = self._live, None
        try:
            self.keys.stop()
        except termios.error:
            logger.warning("Could not restore terminal input mode", exc_info=True)
        if live is None:
            return
        try:
            live.stop()
        except Exception:
            logger.warning("Could not leave full-screen mode", exc_info=True)


class HoldWhileFullScreen(logging.Filter):
    """
    Keeps log records off a terminal handler while the surface owns the
    screen. Held records are replayed through `release()` afterwards.
    """

    def __init__(self, surface):
        super().__init__()
        self.surface = surface
        self.held = []

    def filter(self, record):
        if self.surface.active:
            self.held.append(record)
            return False
        return True

    def release(self, handler):
        held, self.held = self.held, []
        for record in held:
            handler.handle(record)
