"""
landmark_defaults.py

Defines:
    - DEFAULT_LANDMARK_DETECTOR_PARAMS: default settings for the landmark detector
    - bin_count_for_block_size(): analyzer block size -> detector bin count
    - build_detector_config(): utility to merge defaults with parameter overrides
"""

from typing import Any, Dict

from spectral_landmarks.edge.landmark_detector import LandmarkDetectorConfig
from spectral_landmarks.errors import ContractViolation, as_count


# -----------------------------------------------------------
# Default Landmark Detector Parameters
# -----------------------------------------------------------

DEFAULT_LANDMARK_DETECTOR_PARAMS: Dict[str, Any] = {
    # -------------------------------------------------------
    # Analyzer contract
    # -------------------------------------------------------
    # Transform block size of the upstream analyzer. The analyzer keeps
    # the lower half of the spectrum, so the detector sees block_size // 2 bins.
    "block_size": 1024,

    # -------------------------------------------------------
    # Sliding window
    # -------------------------------------------------------
    "t_span": 8,    # half window in steps (= confirmation latency)
}


def bin_count_for_block_size(block_size: int) -> int:
    """
    Number of detector bins produced by an analyzer with the given block size.

    block_size must be an even integer >= 2.
    """
    n = as_count(block_size, "block_size", minimum=2)
    if n % 2:
        raise ContractViolation(f"block_size must be an even integer >= 2, got {n}")
    return n // 2


def build_detector_config(params: Dict[str, Any]) -> LandmarkDetectorConfig:
    """
    Merge caller params + defaults into a LandmarkDetectorConfig instance.

    Priority:
        1. params["bin_count"] / params["block_size"] (overrides)
        2. DEFAULT_LANDMARK_DETECTOR_PARAMS

    An explicit bin_count without block_size is taken as is. If both are
    given they must agree (bin_count == block_size // 2).

    Returns:
        LandmarkDetectorConfig
    """
    merged = {**DEFAULT_LANDMARK_DETECTOR_PARAMS, **params}

    if "bin_count" in params and "block_size" not in params:
        bin_count = params["bin_count"]
    else:
        bin_count = bin_count_for_block_size(merged["block_size"])
        if "bin_count" in params and params["bin_count"] != bin_count:
            raise ContractViolation(
                f"bin_count={params['bin_count']} does not match "
                f"block_size={merged['block_size']} (expected {bin_count})"
            )

    return LandmarkDetectorConfig(
        bin_count=bin_count,
        t_span=merged["t_span"],
    )


__all__ = [
    "DEFAULT_LANDMARK_DETECTOR_PARAMS",
    "bin_count_for_block_size",
    "build_detector_config",
]
