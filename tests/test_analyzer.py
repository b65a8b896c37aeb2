import numpy as np
import pytest

from cli_visualizer.analyzer import SpectrumAnalyzer, band_edges
from cli_visualizer.history import SampleHistory

RATE = 44100


def filled_history(samples, window_size):
    history = SampleHistory(window_size)
    for sample in samples:
        history.append(float(sample))
    return history


def sine(freq, count, rate=RATE):
    return np.sin(2 * np.pi * freq * np.arange(count) / rate)


@pytest.mark.parametrize("window_size", [64, 256, 1024, 4096])
@pytest.mark.parametrize("band_count", [1, 7, 32, 80])
def test_band_values_are_finite_and_bounded(window_size, band_count):
    rng = np.random.default_rng(band_count)
    history = filled_history(rng.uniform(-1, 1, window_size), window_size)
    analyzer = SpectrumAnalyzer(history, RATE, window_size=window_size)

    values = analyzer.process(band_count)

    assert len(values) == band_count
    assert np.all(np.isfinite(values))
    assert np.all((values >= 0) & (values <= 100))


@pytest.mark.parametrize("band_count", [1, 2, 12, 80])
def test_band_edges_increase(band_count):
    edges = band_edges(RATE, band_count)
    assert len(edges) == band_count + 1
    assert edges[0] == pytest.approx(20.0)
    assert edges[-1] == pytest.approx(RATE / 2)
    assert np.all(np.diff(edges) > 0)


def test_band_edges_are_log_spaced():
    edges = band_edges(RATE, 10)
    ratios = edges[1:] / edges[:-1]
    np.testing.assert_allclose(ratios, ratios[0])


def test_band_edges_reject_rate_below_min_freq():
    with pytest.raises(ValueError):
        band_edges(30, 4)


def test_silence_normalizes_to_zero():
    history = filled_history(np.zeros(1024), 1024)
    analyzer = SpectrumAnalyzer(history, RATE)
    for _ in range(3):
        values = analyzer.process(24)
    np.testing.assert_array_equal(values, np.zeros(24))


def test_sine_peaks_in_its_band():
    window = 1024
    freq = 93 * RATE / window  # centred on an FFT bin, ~4 kHz
    history = filled_history(sine(freq, window), window)
    analyzer = SpectrumAnalyzer(history, RATE, window_size=window)

    for _ in range(5):
        values = analyzer.process(32)

    expected = int(np.searchsorted(analyzer.edges, freq, side="right")) - 1
    assert int(np.argmax(analyzer.smoothed)) == expected
    assert values[expected] == pytest.approx(100.0)


def test_low_sine_lands_in_low_band():
    window = 4096
    freq = 12 * RATE / window  # ~129 Hz
    history = filled_history(sine(freq, window), window)
    analyzer = SpectrumAnalyzer(history, RATE, window_size=window)
    analyzer.process(16)

    band = int(np.argmax(analyzer.smoothed))
    assert analyzer.edges[band] <= freq < analyzer.edges[band + 1]


def test_skips_frame_until_window_is_full():
    history = filled_history(np.ones(100), 1024)
    analyzer = SpectrumAnalyzer(history, RATE)

    analyzer.resize(10)
    assert analyzer.update() is False
    np.testing.assert_array_equal(analyzer.process(10), np.zeros(10))


def test_smoothing_moves_towards_new_level():
    window = 256
    history = filled_history(sine(10 * RATE / window, window), window)
    analyzer = SpectrumAnalyzer(history, RATE, window_size=window, smoothing=0.3)
    analyzer.resize(8)

    analyzer.update()
    first = analyzer.smoothed.copy()
    analyzer.update()
    raw = analyzer.raw

    np.testing.assert_allclose(first, raw * 0.3)
    np.testing.assert_allclose(analyzer.smoothed, first * 0.7 + raw * 0.3)


def test_resize_keeps_existing_levels():
    history = filled_history(np.zeros(1024), 1024)
    analyzer = SpectrumAnalyzer(history, RATE)
    analyzer.resize(32)
    analyzer.smoothed[:] = np.arange(32)

    assert analyzer.resize(16) is True
    np.testing.assert_array_equal(analyzer.smoothed, np.arange(16))

    analyzer.resize(40)
    np.testing.assert_array_equal(analyzer.smoothed[:16], np.arange(16))
    np.testing.assert_array_equal(analyzer.smoothed[16:], np.zeros(24))

    assert analyzer.resize(40) is False


def test_resize_clamps_to_one_band():
    analyzer = SpectrumAnalyzer(SampleHistory(64), RATE, window_size=64)
    analyzer.resize(0)
    assert analyzer.band_count == 1
    assert len(analyzer.normalized()) == 1


def test_bands_describe_bin_ranges():
    window = 1024
    history = filled_history(sine(1000, window), window)
    analyzer = SpectrumAnalyzer(history, RATE, window_size=window)
    analyzer.process(20)

    bands = analyzer.bands()
    assert [band.index for band in bands] == list(range(20))
    for band in bands:
        if band.first_bin is None:
            continue
        assert band.first_bin <= band.last_bin
        assert band.low_freq <= analyzer.bin_freqs[band.first_bin]
        assert analyzer.bin_freqs[band.last_bin] < band.high_freq
