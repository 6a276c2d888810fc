"""
Tests for spectral_landmarks/edge/spectrogram_history.py.
"""

import numpy as np
import pytest

from spectral_landmarks.edge.landmark_detector import Landmark
from spectral_landmarks.edge.spectrogram_history import SpectrogramHistory
from spectral_landmarks.errors import ContractViolation
from spectral_landmarks.frame import SpectralFrame


def _frame(amps):
    amps = np.asarray(amps, dtype=np.float64)
    return SpectralFrame.from_arrays(amps, np.arange(amps.size) * 10.0)


def test_capacity_is_bounded():
    hist = SpectrogramHistory(capacity=3)
    for k in range(5):
        hist.push(_frame([float(k)]))
    assert len(hist) == 3
    assert hist.time == 5
    assert hist.first_time == 3
    assert [f[0].amplitude for f in hist.frames] == [2.0, 3.0, 4.0]


def test_invalid_sizes():
    with pytest.raises(ContractViolation):
        SpectrogramHistory(capacity=0)
    with pytest.raises(ContractViolation):
        SpectrogramHistory(capacity=2).to_rgba(height=0)


@pytest.mark.parametrize("capacity", [2.5, 3.0, True, "4"])
def test_non_integer_capacity_rejected(capacity):
    with pytest.raises(ContractViolation):
        SpectrogramHistory(capacity=capacity)


def test_non_integer_height_rejected():
    hist = SpectrogramHistory(capacity=np.int64(2))
    assert hist.capacity == 2
    with pytest.raises(ContractViolation):
        hist.to_rgba(height=1.5)


def test_rgba_layout_and_clamp():
    hist = SpectrogramHistory(capacity=4)
    hist.push(_frame([0.5, 0.9, 2.0, 0.1]))
    hist.push(_frame([0.0, 0.0, 1.0, 0.0]))

    img = hist.to_rgba(height=2)

    assert img.shape == (2, 4, 4)
    assert img.dtype == np.uint8
    # rows sample bins 0 and 2
    assert img[0, 0, 0] == 127
    assert img[1, 0, 0] == 255
    assert img[0, 1, 0] == 0
    assert img[1, 1, 0] == 255
    # filled columns are opaque, the rest transparent
    assert (img[:, :2, 3] == 255).all()
    assert (img[:, 2:, :] == 0).all()


def test_fewer_bins_than_rows_repeats_first_bin():
    hist = SpectrogramHistory(capacity=1)
    hist.push(_frame([0.2, 1.0]))
    img = hist.to_rgba(height=4)
    assert (img[:, 0, 0] == 51).all()


def test_landmark_overlay():
    hist = SpectrogramHistory(capacity=4)
    for _ in range(3):
        hist.push(_frame([0.0, 0.0, 0.0, 0.0]))
    hist.add_landmarks([Landmark(time=2, bin_index=2, frequency=20.0, amplitude=0.0)])

    img = hist.to_rgba(height=2)
    assert img[1, 1, 1] == 255
    assert img[:, :, 1].sum() == 255

    plain = hist.to_rgba(height=2, overlay_landmarks=False)
    assert plain[:, :, 1].sum() == 0


def test_landmarks_expire_with_frames():
    hist = SpectrogramHistory(capacity=2)
    hist.push(_frame([1.0]))
    hist.add_landmarks([Landmark(time=1, bin_index=0, frequency=0.0, amplitude=1.0)])
    assert len(hist.landmarks) == 1

    hist.push(_frame([0.0]))
    hist.push(_frame([0.0]))
    assert hist.landmarks == []
