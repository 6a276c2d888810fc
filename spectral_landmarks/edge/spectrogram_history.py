# spectrogram_history.py

from collections import deque
from typing import Deque, Iterable, List

import numpy as np

from spectral_landmarks.edge.landmark_detector import Landmark
from spectral_landmarks.errors import as_count
from spectral_landmarks.frame import SpectralFrame


class SpectrogramHistory:
    """
    Bounded history of the most recent spectral frames, for display.

    Keeps at most `capacity` frames (oldest dropped first) plus the landmarks
    that fall inside the retained span, and rasterises them into an RGBA
    pixel buffer:
      - column x  : x-th retained frame, oldest on the left
      - row y     : bin y * (bin_count // height)
      - red       : min(255, int(255 * amplitude))
      - green     : 255 on landmark pixels (when overlay is enabled)
      - alpha     : 255

    Pixel data only; compositing onto a screen is left to the caller.
    """

    def __init__(self, capacity: int):
        self.capacity = as_count(capacity, "capacity")
        self.time = 0
        self._frames: Deque[SpectralFrame] = deque()
        self._landmarks: Deque[Landmark] = deque()

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> List[SpectralFrame]:
        return list(self._frames)

    @property
    def landmarks(self) -> List[Landmark]:
        return list(self._landmarks)

    @property
    def first_time(self) -> int:
        """Step index of the oldest retained frame."""
        return self.time - len(self._frames) + 1

    def push(self, frame: SpectralFrame) -> None:
        self.time += 1
        self._frames.append(frame)
        while len(self._frames) > self.capacity:
            self._frames.popleft()
        self._expire_landmarks()

    def add_landmarks(self, landmarks: Iterable[Landmark]) -> None:
        self._landmarks.extend(landmarks)
        self._expire_landmarks()

    def _expire_landmarks(self) -> None:
        first = self.first_time
        while self._landmarks and self._landmarks[0].time < first:
            self._landmarks.popleft()

    def to_rgba(self, height: int, overlay_landmarks: bool = True) -> np.ndarray:
        """
        Render the retained frames as a (height, capacity, 4) uint8 array.

        Columns past the last retained frame stay fully transparent.
        """
        height = as_count(height, "height")

        img = np.zeros((height, self.capacity, 4), dtype=np.uint8)
        rows = np.arange(height)

        for x, frame in enumerate(self._frames):
            amps = frame.amplitudes()
            index = rows * (amps.size // height)
            column = np.zeros(height, dtype=np.float64)
            valid = index < amps.size
            column[valid] = amps[index[valid]]

            red = np.minimum(np.floor(255.0 * np.clip(column, 0.0, None)), 255.0)
            img[:, x, 0] = red.astype(np.uint8)
            img[:, x, 3] = 255

        if overlay_landmarks:
            self._overlay(img, height)

        return img

    def _overlay(self, img: np.ndarray, height: int) -> None:
        if not self._frames:
            return
        step = max(1, len(self._frames[0]) // height)
        first = self.first_time
        for lm in self._landmarks:
            x = lm.time - first
            if not 0 <= x < len(self._frames):
                continue
            y = lm.bin_index // step
            if y < height:
                img[y, x, 1] = 255
