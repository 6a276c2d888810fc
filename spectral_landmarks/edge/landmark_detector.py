from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Tuple

from spectral_landmarks.errors import ContractViolation, as_count
from spectral_landmarks.frame import SpectralFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Landmark:
    """
    A (time, bin) sample. Used both for the per-bin window contents and for
    confirmed local maxima returned by LandmarkDetector.process().
    """

    time: int
    bin_index: int
    frequency: float
    amplitude: float


@dataclass
class LandmarkDetectorConfig:
    """
    Configuration for LandmarkDetector.

    bin_count : number of bins in every frame fed to the detector
    t_span    : half window in steps; landmarks are confirmed t_span steps
                after they occur, and each bin keeps 2 * t_span samples
    """

    bin_count: int = 512
    t_span: int = 8


class LandmarkDetector:
    """
    Online per-bin sliding-window local-maximum detector.

    For every bin, keeps the last 2 * t_span samples and the maximum among
    them. A bin's maximum is confirmed as a landmark on the step where it sits
    exactly t_span steps in the past, i.e. centred in the window.

    State is bounded to O(bin_count * t_span) regardless of stream length.
    Not safe for concurrent process() calls on the same instance.
    """

    def __init__(self, bin_count: int, t_span: int):
        self._bin_count = as_count(bin_count, "bin_count")
        self._t_span = as_count(t_span, "t_span")
        self._time = 0

        span = 2 * self._t_span
        self._windows: List[Deque[Landmark]] = []
        self._max_vals: List[Landmark] = []
        for i in range(self._bin_count):
            sentinel = Landmark(time=0, bin_index=i, frequency=0.0, amplitude=0.0)
            self._windows.append(deque([sentinel] * span))
            self._max_vals.append(sentinel)

        logger.debug(
            "LandmarkDetector: bin_count=%d t_span=%d window=%d",
            self._bin_count,
            self._t_span,
            span,
        )

    @classmethod
    def from_config(cls, cfg: LandmarkDetectorConfig) -> "LandmarkDetector":
        return cls(cfg.bin_count, cfg.t_span)

    # ------------- introspection -------------

    @property
    def bin_count(self) -> int:
        return self._bin_count

    @property
    def t_span(self) -> int:
        return self._t_span

    @property
    def time(self) -> int:
        """Index of the last processed step (0 before the first frame)."""
        return self._time

    def window(self, bin_index: int) -> Tuple[Landmark, ...]:
        """Copy of bin `bin_index`'s window, oldest first."""
        return tuple(self._windows[bin_index])

    def current_max(self, bin_index: int) -> Landmark:
        return self._max_vals[bin_index]

    # ------------- processing -------------

    def process(self, frame: SpectralFrame) -> List[Landmark]:
        """
        Consume the frame for the next step and return confirmed landmarks.

        Parameters
        ----------
        frame :
            SpectralFrame with exactly `bin_count` bins.

        Returns
        -------
        list of Landmark
            Maxima whose time is exactly `time - t_span`, in ascending
            bin_index order. Usually empty.
        """
        if len(frame) != self._bin_count:
            raise ContractViolation(
                f"frame has {len(frame)} bins, detector expects {self._bin_count}"
            )

        self._time += 1
        t = self._time
        max_vals = self._max_vals

        for i, (line, b) in enumerate(zip(self._windows, frame)):
            sample = Landmark(time=t, bin_index=i, frequency=b.frequency, amplitude=b.amplitude)

            if sample.amplitude > max_vals[i].amplitude:
                max_vals[i] = sample

            line.append(sample)
            evicted = line.popleft()

            # current maximum just left the window
            if evicted == max_vals[i]:
                max_vals[i] = self._max_in_line(line)

        # at t == t_span a bin still holding its warm-up sentinel confirms it (time 0)
        confirm_time = t - self._t_span
        found = [m for m in max_vals if m.time == confirm_time]
        if found:
            logger.debug("step %d: %d landmark(s) at time %d", t, len(found), confirm_time)
        return found

    def process_many(self, frames: Iterable[SpectralFrame]) -> List[Landmark]:
        out: List[Landmark] = []
        for frame in frames:
            out.extend(self.process(frame))
        return out

    @staticmethod
    def _max_in_line(line: Deque[Landmark]) -> Landmark:
        # earliest of equal maxima wins
        best = line[0]
        for elem in line:
            if elem.amplitude > best.amplitude:
                best = elem
        return best
