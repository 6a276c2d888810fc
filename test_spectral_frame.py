"""
Tests for spectral_landmarks/frame.py.

Validates:
    - empty() / from_arrays() construction
    - dominant_frequency() scan and tie-break
    - shift() index remapping, drop and collision policy
"""

import dataclasses

import numpy as np
import pytest

from spectral_landmarks.errors import ContractViolation
from spectral_landmarks.frame import FrequencyBin, SpectralFrame


def _frame(amps, freqs):
    return SpectralFrame.from_arrays(amps, freqs)


# ---------------------------------------------------------------------------
# construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_empty_frame_is_all_zero(self):
        frame = SpectralFrame.empty(5)
        assert len(frame) == 5
        assert all(b == FrequencyBin(0.0, 0.0) for b in frame)

    def test_empty_zero_bins(self):
        assert len(SpectralFrame.empty(0)) == 0

    def test_from_arrays_keeps_order(self):
        frame = _frame([1.0, 2.0, 3.0], [10.0, 20.0, 30.0])
        assert frame[1] == FrequencyBin(amplitude=2.0, frequency=20.0)
        np.testing.assert_array_equal(frame.amplitudes(), [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(frame.frequencies(), [10.0, 20.0, 30.0])

    def test_from_arrays_length_mismatch(self):
        with pytest.raises(ContractViolation):
            _frame([1.0, 2.0], [10.0])

    def test_from_arrays_rejects_2d(self):
        with pytest.raises(ContractViolation):
            _frame(np.ones((2, 2)), np.ones((2, 2)))

    def test_bins_are_frozen(self):
        b = FrequencyBin(1.0, 440.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            b.amplitude = 2.0  # type: ignore[misc]

    def test_equality_by_value(self):
        assert _frame([1.0], [2.0]) == _frame([1.0], [2.0])
        assert _frame([1.0], [2.0]) != _frame([1.0], [3.0])


# ---------------------------------------------------------------------------
# dominant_frequency
# ---------------------------------------------------------------------------


class TestDominantFrequency:
    def test_all_zero_frame(self):
        assert SpectralFrame.empty(8).dominant_frequency() == 0.0

    def test_single_nonzero_bin(self):
        frame = _frame([0.0, 0.0, 0.3, 0.0], [100.0, 200.0, 300.0, 400.0])
        assert frame.dominant_frequency() == 300.0

    def test_first_maximum_wins(self):
        frame = _frame([0.1, 0.7, 0.2, 0.7], [100.0, 200.0, 300.0, 400.0])
        assert frame.dominant_frequency() == 200.0

    def test_empty_sequence(self):
        assert SpectralFrame.empty(0).dominant_frequency() == 0.0


# ---------------------------------------------------------------------------
# shift
# ---------------------------------------------------------------------------


class TestShift:
    def test_identity(self):
        rng = np.random.default_rng(7)
        frame = _frame(rng.random(32), rng.random(32) * 4000.0)
        assert frame.shift(1.0) == frame

    def test_returns_new_frame(self):
        frame = _frame([1.0, 2.0], [10.0, 20.0])
        shifted = frame.shift(0.5)
        assert shifted is not frame
        assert frame == _frame([1.0, 2.0], [10.0, 20.0])

    def test_downshift_sums_amplitude_last_frequency_wins(self):
        frame = _frame([1.0, 2.0, 3.0, 4.0], [10.0, 20.0, 30.0, 40.0])
        shifted = frame.shift(0.5)
        # k=0,1 -> 0 ; k=2,3 -> 1
        assert shifted[0] == FrequencyBin(3.0, 10.0)
        assert shifted[1] == FrequencyBin(7.0, 20.0)
        assert shifted[2] == FrequencyBin(0.0, 0.0)
        assert shifted[3] == FrequencyBin(0.0, 0.0)
        assert len(shifted) == 4

    def test_upshift_drops_out_of_range(self):
        frame = _frame([1.0, 2.0, 3.0, 4.0], [10.0, 20.0, 30.0, 40.0])
        shifted = frame.shift(2.0)
        assert shifted[0] == FrequencyBin(1.0, 20.0)
        assert shifted[1] == FrequencyBin(0.0, 0.0)
        assert shifted[2] == FrequencyBin(2.0, 40.0)
        assert shifted[3] == FrequencyBin(0.0, 0.0)
        assert shifted.amplitudes().sum() == 3.0

    def test_zero_amplitude_source_still_overwrites_frequency(self):
        frame = _frame([5.0, 0.0], [100.0, 200.0])
        shifted = frame.shift(0.5)
        assert shifted[0] == FrequencyBin(5.0, 100.0)

    def test_negative_factor_saturates_to_first_bin(self):
        frame = _frame([1.0, 2.0, 3.0], [10.0, 20.0, 30.0])
        shifted = frame.shift(-1.0)
        assert shifted[0] == FrequencyBin(6.0, -30.0)
        assert shifted[1] == FrequencyBin(0.0, 0.0)

    def test_infinite_factor_keeps_only_bin_zero(self):
        frame = _frame([1.0, 2.0], [10.0, 20.0])
        shifted = frame.shift(float("inf"))
        assert shifted[0].amplitude == 1.0
        assert shifted[1] == FrequencyBin(0.0, 0.0)
