"""
frame.py

Spectral frame data model for the landmark extraction engine.

Exposes:
    - FrequencyBin  : one channel's (amplitude, frequency) reading at one step
    - SpectralFrame : fixed-length, read-only sequence of FrequencyBin

A SpectralFrame is produced once per step by an external spectral analyzer
and handed to the edge components (LandmarkDetector, SpectrogramHistory).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union, overload

import numpy as np

from spectral_landmarks.errors import ContractViolation


@dataclass(frozen=True)
class FrequencyBin:
    amplitude: float = 0.0
    frequency: float = 0.0


_ZERO_BIN = FrequencyBin(0.0, 0.0)


class SpectralFrame:
    """
    Spectrum snapshot at one discrete step.

    The bin count B is fixed at construction. Frames are immutable: every
    transform returns a new frame.
    """

    __slots__ = ("_bins",)

    def __init__(self, bins: Sequence[FrequencyBin]):
        self._bins: Tuple[FrequencyBin, ...] = tuple(bins)

    # ------------- constructors -------------

    @classmethod
    def empty(cls, bin_count: int) -> "SpectralFrame":
        """Zero frame: every bin has amplitude 0 and frequency 0.0."""
        if bin_count < 0:
            raise ContractViolation(f"bin_count must be >= 0, got {bin_count}")
        return cls((_ZERO_BIN,) * bin_count)

    @classmethod
    def from_arrays(cls, amplitudes, frequencies) -> "SpectralFrame":
        """
        Build a frame from two equal-length 1-D sequences.

        Parameters
        ----------
        amplitudes :
            Non-negative per-bin amplitudes.
        frequencies :
            Per-bin frequency estimates in Hz.
        """
        amp = np.asarray(amplitudes, dtype=np.float64)
        freq = np.asarray(frequencies, dtype=np.float64)
        if amp.ndim != 1 or freq.ndim != 1:
            raise ContractViolation(
                f"amplitudes and frequencies must be 1-D, got shapes {amp.shape} and {freq.shape}"
            )
        if amp.size != freq.size:
            raise ContractViolation(
                f"amplitudes ({amp.size}) and frequencies ({freq.size}) differ in length"
            )
        return cls(FrequencyBin(float(a), float(f)) for a, f in zip(amp, freq))

    # ------------- sequence protocol -------------

    @property
    def bins(self) -> Tuple[FrequencyBin, ...]:
        return self._bins

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self) -> Iterator[FrequencyBin]:
        return iter(self._bins)

    @overload
    def __getitem__(self, index: int) -> FrequencyBin: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[FrequencyBin, ...]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self._bins[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, SpectralFrame):
            return NotImplemented
        return self._bins == other._bins

    def __hash__(self) -> int:
        return hash(self._bins)

    def __repr__(self) -> str:
        return f"SpectralFrame(bin_count={len(self._bins)})"

    # ------------- array views -------------

    def amplitudes(self) -> np.ndarray:
        return np.fromiter((b.amplitude for b in self._bins), dtype=np.float64, count=len(self._bins))

    def frequencies(self) -> np.ndarray:
        return np.fromiter((b.frequency for b in self._bins), dtype=np.float64, count=len(self._bins))

    # ------------- derived operations -------------

    def dominant_frequency(self) -> float:
        """
        Frequency of the loudest bin.

        Single linear scan with strict '>' so the first of several equal
        maxima wins. An all-zero frame returns 0.0.
        """
        max_freq = 0.0
        max_amp = 0.0
        for b in self._bins:
            if b.amplitude > max_amp:
                max_amp = b.amplitude
                max_freq = b.frequency
        return max_freq

    def shift(self, factor: float) -> "SpectralFrame":
        """
        Remap bin indices by a pitch factor.

        Source bin k lands on floor(k * factor). Destinations past the last
        bin are dropped. When several sources land on the same destination
        their amplitudes are summed in ascending source order and the
        destination frequency is the last source's frequency * factor.
        A negative product saturates to bin 0.
        """
        n = len(self._bins)
        amps = [0.0] * n
        freqs = [0.0] * n

        for k, b in enumerate(self._bins):
            pos = k * factor
            if pos >= n:
                continue
            # saturating conversion: negative and NaN products land on bin 0
            index = int(math.floor(pos)) if pos > 0 else 0
            amps[index] += b.amplitude
            freqs[index] = b.frequency * factor

        return SpectralFrame(FrequencyBin(a, f) for a, f in zip(amps, freqs))
