from functools import lru_cache

# Red -> violet, low bands to high bands
GRADIENT = (
    (255, 0, 0),      # red
    (255, 127, 0),    # orange
    (255, 255, 0),    # yellow
    (0, 255, 0),      # green
    (0, 255, 255),    # cyan
    (0, 0, 255),      # blue
    (148, 0, 211),    # violet
)


@lru_cache(maxsize=1024)
def band_color(index, total):
    """RGB triple for band `index` of `total`, interpolated along GRADIENT."""
    total = max(total, 1)
    position = index / (total - 1) if total > 1 else 0.0
    position = min(max(position, 0.0), 1.0)

    scaled = position * (len(GRADIENT) - 1)
    segment = min(int(scaled), len(GRADIENT) - 2)
    t = scaled - segment
    start, end = GRADIENT[segment], GRADIENT[segment + 1]
    return tuple(int(round(a + (b - a) * t)) for a, b in zip(start, end))


def rich_color(index, total):
    r, g, b = band_color(index, total)
    return f"rgb({r},{g},{b})"
