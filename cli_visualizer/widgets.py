from functools import lru_cache

from rich.console import Group
from rich.panel import Panel
from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from cli_visualizer.colors import rich_color
from cli_visualizer.settings import (
    BAR_GAP,
    BAR_WIDTH,
    MAX_BAR_ROWS,
    MAX_DISPLAY_WIDTH,
    MAX_LEGEND_SEGMENTS,
    MIN_DISPLAY_WIDTH,
    MIN_LEGEND_SEGMENTS,
    MIN_TERMINAL_HEIGHT,
    MIN_TERMINAL_WIDTH,
)
from cli_visualizer.stream import format_time

STRIDE = BAR_WIDTH + BAR_GAP
PANEL_WIDTH = 4           # Border + horizontal padding
PANEL_HEIGHT = 2          # Top and bottom border
FOOTER_ROWS = 3           # Legend, frequency labels, status
BLOCK = "█"


def is_too_small(width, height):
    return width < MIN_TERMINAL_WIDTH or height < MIN_TERMINAL_HEIGHT


def display_width(width):
    inner = width - PANEL_WIDTH
    return min(max(inner, MIN_DISPLAY_WIDTH), MAX_DISPLAY_WIDTH)


def band_count_for_width(width):
    return max(1, (display_width(width) + BAR_GAP) // STRIDE)


def bar_rows_for_height(height):
    return min(max(1, height - PANEL_HEIGHT - FOOTER_ROWS), MAX_BAR_ROWS)


def bar_height(value, rows):
    """Rows filled for a 0-100 level; at least one so every band shows."""
    filled = int(round(value / 100 * rows))
    return min(max(filled, 1), rows)


def legend_segment_count(width):
    return min(max(width // 12, MIN_LEGEND_SEGMENTS), MAX_LEGEND_SEGMENTS)


def segment_starts(columns, segments):
    segments = max(1, min(segments, columns))
    return sorted({round(k * columns / segments) for k in range(segments)})


def format_frequency(hz):
    if hz < 1000:
        return f"{hz:.0f}Hz"
    return f"{hz / 1000:.1f}kHz"


@lru_cache(maxsize=1024)
def band_style(index, total):
    return Style(color=rich_color(index, total))


class BarChart:
    """
    Vertical bars, one per band, growing up from the bottom row.

    Rendered straight to segments: each filled cell run is one segment with
    a cached per-band style, and neighbouring blank cells are merged.
    """

    def __init__(self, values, rows):
        self.rows = rows
        self.heights = [bar_height(v, rows) for v in values]

    def row_segments(self, level):
        total = len(self.heights)
        blank = 0
        for i, height in enumerate(self.heights):
            gap = BAR_GAP if i < total - 1 else 0
            if height >= level:
                if blank:
                    yield Segment(" " * blank)
                yield Segment(BLOCK * BAR_WIDTH, band_style(i, total))
                blank = gap
            else:
                blank += BAR_WIDTH + gap
        if blank:
            yield Segment(" " * blank)

    def plain_rows(self):
        return [
            "".join(segment.text for segment in self.row_segments(self.rows - row))
            for row in range(self.rows)
        ]

    def __rich_console__(self, console, options):
        for row in range(self.rows):
            yield from self.row_segments(self.rows - row)
            yield Segment.line()


def render_legend(band_count, segments):
    columns = band_count * STRIDE - BAR_GAP
    starts = segment_starts(columns, segments)
    legend = Text(no_wrap=True, overflow="crop")
    for k, start in enumerate(starts):
        end = starts[k + 1] if k + 1 < len(starts) else columns
        legend.append("┬" + "─" * (end - start - 1), style=band_style(start // STRIDE, band_count))
    return legend


def render_labels(band_starts, segments):
    """Start frequency of the band under each legend tick, where it fits."""
    columns = len(band_starts) * STRIDE - BAR_GAP
    cells = [" "] * columns
    cursor = 0
    for start in segment_starts(columns, segments):
        label = format_frequency(band_starts[start // STRIDE])
        if start < cursor or start + len(label) > columns:
            continue
        cells[start:start + len(label)] = label
        cursor = start + len(label) + 1
    return Text("".join(cells), style="dim", no_wrap=True, overflow="crop")


def render_status(elapsed, duration, sample_rate, band_count):
    status = Text(no_wrap=True, overflow="ellipsis")
    status.append("▶ ", style="bold green")
    status.append(f"{format_time(elapsed)} / {format_time(duration)}", style="bold")
    status.append(f"  ·  {sample_rate} Hz  ·  {band_count} bands  ·  ", style="dim")
    status.append("q", style="bold cyan")
    status.append(" / ", style="dim")
    status.append("Ctrl+C", style="bold cyan")
    status.append(" to quit", style="dim")
    return status


def too_small_notice(width, height):
    return Text(
        f"Terminal too small ({width}x{height}), "
        f"need at least {MIN_TERMINAL_WIDTH}x{MIN_TERMINAL_HEIGHT}",
        style="bold red",
    )


def compose_frame(values, band_starts, width, height, elapsed, duration, sample_rate):
    segments = legend_segment_count(width)
    parts = [BarChart(values, bar_rows_for_height(height))]
    parts.append(render_legend(len(values), segments))
    parts.append(render_labels(band_starts, segments))
    parts.append(render_status(elapsed, duration, sample_rate, len(values)))
    return Panel(
        Group(*parts),
        title="[bold cyan]Spectrum Visualizer",
        border_style="magenta",
    )
