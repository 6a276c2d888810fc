# landmarks_postprocess.py

from typing import Iterable

import numpy as np
import pandas as pd

from spectral_landmarks.edge.landmark_detector import Landmark

LANDMARK_COLUMNS = ["time", "bin_index", "frequency", "amplitude"]

SUMMARY_COLUMNS = [
    "bin_index",
    "landmark_count",
    "mean_amplitude",
    "max_amplitude",
    "mean_frequency",
]


def landmarks_to_df(landmarks: Iterable[Landmark]) -> pd.DataFrame:
    """
    One row per landmark, in emission order.
    """
    rows = [(lm.time, lm.bin_index, lm.frequency, lm.amplitude) for lm in landmarks]
    if not rows:
        return pd.DataFrame(
            {
                "time": pd.Series(dtype=np.int64),
                "bin_index": pd.Series(dtype=np.int64),
                "frequency": pd.Series(dtype=np.float64),
                "amplitude": pd.Series(dtype=np.float64),
            }
        )

    df = pd.DataFrame(rows, columns=LANDMARK_COLUMNS)
    return df.astype(
        {"time": np.int64, "bin_index": np.int64, "frequency": np.float64, "amplitude": np.float64}
    )


def summarize_landmarks(landmarks_df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-bin summary of a landmark table, sorted by bin_index.
    """
    if landmarks_df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    grouped = landmarks_df.groupby("bin_index", sort=True)
    out = pd.DataFrame(
        {
            "landmark_count": grouped["time"].count(),
            "mean_amplitude": grouped["amplitude"].mean(),
            "max_amplitude": grouped["amplitude"].max(),
            "mean_frequency": grouped["frequency"].mean(),
        }
    ).reset_index()
    return out[SUMMARY_COLUMNS]
