"""
landmark_pipeline.py

Wires an external spectral analyzer to the landmark detector:

    audio block -> analyzer -> SpectralFrame -> SpectrogramHistory
                                             -> LandmarkDetector -> sinks

The detector is single-owner. Capture callbacks running on other threads
hand blocks over with submit(); the owning thread calls drain() to process
everything queued so far, in order.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, List, Optional

import numpy as np

from spectral_landmarks.edge.landmark_detector import Landmark, LandmarkDetector
from spectral_landmarks.edge.spectrogram_history import SpectrogramHistory
from spectral_landmarks.errors import ContractViolation, as_count
from spectral_landmarks.frame import SpectralFrame

logger = logging.getLogger(__name__)

Analyzer = Callable[[np.ndarray], SpectralFrame]
LandmarkSink = Callable[[List[Landmark]], None]


class LandmarkPipeline:
    """
    Per-step driver around one LandmarkDetector.

    Parameters
    ----------
    analyzer :
        Callable turning one block of `step_size` samples into a
        SpectralFrame with `detector.bin_count` bins.
    detector :
        The detector owned by this pipeline.
    history :
        Optional SpectrogramHistory receiving every frame and landmark.
    step_size :
        Expected samples per block. None disables the length check.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        detector: LandmarkDetector,
        history: Optional[SpectrogramHistory] = None,
        step_size: Optional[int] = None,
    ):
        self.analyzer = analyzer
        self.detector = detector
        self.history = history
        self.step_size = None if step_size is None else as_count(step_size, "step_size")
        self._sinks: List[LandmarkSink] = []
        self._pending: "queue.Queue[np.ndarray]" = queue.Queue()

    def add_sink(self, sink: LandmarkSink) -> None:
        """Register a callable receiving every non-empty landmark batch."""
        self._sinks.append(sink)

    # ------------- owner-thread processing -------------

    def feed_audio(self, samples) -> List[Landmark]:
        """Analyze one block of samples and run it through the detector."""
        block = np.asarray(samples, dtype=np.float64).reshape(-1)
        if self.step_size is not None and block.size != self.step_size:
            raise ContractViolation(
                f"audio block has {block.size} samples, expected {self.step_size}"
            )

        frame = self.analyzer(block)
        return self.process_frame(frame)

    def process_frame(self, frame: SpectralFrame) -> List[Landmark]:
        """Run an already analyzed frame through history and detector."""
        # reject before the history sees it
        if len(frame) != self.detector.bin_count:
            raise ContractViolation(
                f"analyzer produced {len(frame)} bins, detector expects {self.detector.bin_count}"
            )
        if self.detector.time == 0:
            logger.info(
                "LandmarkPipeline: first frame, bin_count=%d t_span=%d",
                self.detector.bin_count,
                self.detector.t_span,
            )

        landmarks = self.detector.process(frame)

        if self.history is not None:
            self.history.push(frame)
            self.history.add_landmarks(landmarks)

        if landmarks:
            self._dispatch(landmarks)
        return landmarks

    def _dispatch(self, landmarks: List[Landmark]) -> None:
        for sink in self._sinks:
            try:
                sink(list(landmarks))
            except Exception:
                logger.warning("LandmarkPipeline: sink %r failed", sink, exc_info=True)
                raise

    # ------------- cross-thread hand-off -------------

    def submit(self, samples) -> None:
        """Queue one block of samples; safe to call from any thread."""
        self._pending.put(np.array(samples, dtype=np.float64).reshape(-1))

    def pending(self) -> int:
        return self._pending.qsize()

    def drain(self) -> List[Landmark]:
        """
        Process every queued block in submission order (owner thread only).

        Not atomic: if the analyzer or a sink raises, blocks processed before
        the failing one stay applied to the detector and history, their
        landmarks have already reached the sinks, and later blocks stay
        queued. The exception propagates after a warning with the partial
        count.
        """
        out: List[Landmark] = []
        while True:
            try:
                block = self._pending.get_nowait()
            except queue.Empty:
                break
            try:
                out.extend(self.feed_audio(block))
            except Exception:
                logger.warning(
                    "LandmarkPipeline.drain: stopped at step %d with %d landmark(s) "
                    "already emitted, %d block(s) still queued",
                    self.detector.time,
                    len(out),
                    self._pending.qsize(),
                )
                raise
        return out
