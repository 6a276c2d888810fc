"""
processors.py

Concrete processor implementations for the frame processing framework.

Exposes:
    - BaseProcessor     : convenience base class (validation, timing)
    - LandmarkProcessor : runs a fresh LandmarkDetector over a frame sequence

All processors are structurally compatible with the FrameProcessor protocol
defined in frame_processing_framework.py (name + run(...) signature).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Tuple

from spectral_landmarks.edge.landmark_defaults import build_detector_config
from spectral_landmarks.edge.landmark_detector import LandmarkDetector
from spectral_landmarks.errors import ContractViolation
from spectral_landmarks.frame import SpectralFrame


# ----------------------------------------------------------------------
# Base processor with shared helpers
# ----------------------------------------------------------------------


@dataclass
class BaseProcessor:
    """
    Base class for frame processors.

    Provides:
        - name            : short identifier for namespacing (e.g. "landmarks")
        - _validate_frames: basic sanity checks on the input frames
        - _with_timing    : measure runtime of the wrapped function

    Concrete processors inherit from this and implement .run().
    """

    name: str

    def _validate_frames(self, frames: Sequence[SpectralFrame], params: Dict[str, Any]) -> None:
        """
        Perform basic validation on a frame sequence.

        Checks:
            - every element is a SpectralFrame
            - all frames share one bin count
            - if min_frames is present in params, there are at least that many
        """
        bin_count = None
        for i, frame in enumerate(frames):
            if not isinstance(frame, SpectralFrame):
                raise TypeError(f"frame {i} must be a SpectralFrame, got {type(frame)}")
            if bin_count is None:
                bin_count = len(frame)
            elif len(frame) != bin_count:
                raise ContractViolation(
                    f"frame {i} has {len(frame)} bins, expected {bin_count}"
                )

        min_frames = params.get("min_frames")
        if min_frames is not None and len(frames) < min_frames:
            raise ValueError(f"too few frames: {len(frames)} < required {min_frames}")

    def _with_timing(self, func: Callable[..., Any], *args, **kwargs) -> Tuple[Any, float]:
        """
        Execute fn(*args, **kwargs) and return (result, elapsed_time_seconds).
        """
        t0 = time.perf_counter()
        result = func(*args, **kwargs)
        dt = time.perf_counter() - t0
        return result, dt


# ----------------------------------------------------------------------
# LandmarkProcessor
# ----------------------------------------------------------------------


@dataclass
class LandmarkProcessor(BaseProcessor):
    """
    Batch adapter over LandmarkDetector.

    A new detector is built per run, so every stream starts from the warm-up
    state. bin_count defaults to the bin count of the frames; t_span and
    block_size are read from params (see landmark_defaults).

    The processor returns:
        - results: compact KPIs (namespaced later as <name>__*)
        - state  : landmark list, config and per-step emission counts
    """

    t_span: int = 8

    def run(
        self,
        frames: Sequence[SpectralFrame],
        params: Dict[str, Any],
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        frames = list(frames)
        self._validate_frames(frames, params)

        cfg_params: Dict[str, Any] = {"t_span": params.get("t_span", self.t_span)}
        if "block_size" in params:
            cfg_params["block_size"] = params["block_size"]
        if "bin_count" in params:
            cfg_params["bin_count"] = params["bin_count"]
        elif frames and "block_size" not in params:
            cfg_params["bin_count"] = len(frames[0])
        cfg = build_detector_config(cfg_params)

        detector = LandmarkDetector.from_config(cfg)

        def _detect():
            per_step = []
            found = []
            for frame in frames:
                batch = detector.process(frame)
                per_step.append(len(batch))
                found.extend(batch)
            return found, per_step

        (landmarks, per_step), latency = self._with_timing(_detect)

        n_frames = len(frames)
        results: Dict[str, Any] = {
            "landmark_count": len(landmarks),
            "frame_count": n_frames,
            "bin_count": cfg.bin_count,
            "landmark_rate": (len(landmarks) / n_frames) if n_frames else 0.0,
            "latency_s": latency,
        }

        state: Dict[str, Any] = {
            "processor": self.name,
            "landmarks": landmarks,
            "landmarks_per_step": per_step,
            "config": cfg,
            "latency_s": latency,
        }

        return results, state


def has_processor(processors, name: str) -> bool:
    """True if a processor named `name` is in `processors`; used to check per-processor overrides."""
    return any(p.name == name for p in processors)
