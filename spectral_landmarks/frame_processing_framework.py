"""
frame_processing_framework.py

Batch orchestration for frame processors in the spectral_landmarks package.

This module defines:
    - FrameProcessor          : protocol describing the processor interface
    - process_frame_streams() : main orchestration entry point

A "stream" is a named, ordered sequence of SpectralFrames, e.g. the output
of an external analyzer over one recording.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

import pandas as pd

from spectral_landmarks.frame import SpectralFrame
from spectral_landmarks.processors import has_processor

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Processor contract
# ----------------------------------------------------------------------


@runtime_checkable
class FrameProcessor(Protocol):
    """
    Interface for frame processors used by the framework.

    A processor receives an ordered frame sequence and a parameter dict,
    and returns:
        - results: scalar metrics (for the main results DataFrame)
        - state  : internal state (for debugging, plotting, or analysis)
    """

    @property
    def name(self) -> str:
        """
        Short identifier used as a namespace prefix in result columns.

        Examples
        --------
        "landmarks", "landmarks_fast", etc.
        """
        ...

    def run(
        self,
        frames: Sequence[SpectralFrame],
        params: Dict[str, Any],
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Execute the processor on a single frame stream.

        Parameters
        ----------
        frames :
            Ordered SpectralFrames, one per step, all with the same bin count.
        params :
            Combined parameter dictionary, including global settings and any
            per-processor overrides.

        Returns
        -------
        results :
            Dict of scalar metrics. These are flattened into the main results
            DataFrame with a '<name>__' prefix.
        state :
            Dict of internal state for this processor. One state dict is
            collected per stream.
        """
        ...


# ----------------------------------------------------------------------
# Helper for namespaced result columns
# ----------------------------------------------------------------------


def _flatten_with_namespace(ns: str, d: Dict[str, Any]) -> Dict[str, Any]:
    """
    Prefix keys in a metrics dict with a processor namespace.

    Examples
    --------
    >>> _flatten_with_namespace("landmarks", {"landmark_count": 3})
    {'landmarks__landmark_count': 3}
    """
    return {f"{ns}__{k}": v for k, v in d.items()}


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------


def process_frame_streams(
    *,
    processors: List[FrameProcessor],
    streams: Mapping[str, Sequence[SpectralFrame]],
    params_global: Optional[Dict[str, Any]] = None,
    params_by_processor: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Tuple[pd.DataFrame, Dict[str, pd.DataFrame]]:
    """
    Run one or more FrameProcessors over a set of named frame streams.

    Parameters
    ----------
    processors :
        FrameProcessor implementations, each with a unique `.name`.
    streams :
        Mapping from stream key to its ordered frames.
    params_global :
        Parameters shared by all processors (e.g. {"t_span": 8}).
    params_by_processor :
        Optional mapping from processor name to overrides merged on top of
        `params_global`.

    Returns
    -------
    results_df :
        One row per stream: "stream_key" plus namespaced metrics
        "<processor>__<metric>", sorted by stream_key.
    states_df_by_proc :
        Mapping from processor name to a DataFrame of state dicts, one row
        per stream, including "stream_key".
    """
    if params_global is None:
        params_global = {}
    if params_by_processor is None:
        params_by_processor = {}

    names = [p.name for p in processors]
    if len(set(names)) != len(names):
        raise ValueError(f"processor names must be unique, got {names}")

    unknown = [n for n in params_by_processor if not has_processor(processors, n)]
    if unknown:
        raise ValueError(f"params_by_processor names unknown processor(s): {unknown}")

    logger.info("processing %d stream(s) with %d processor(s)", len(streams), len(processors))

    results_rows: List[Dict[str, Any]] = []
    states_by_processor: Dict[str, List[Dict[str, Any]]] = {p.name: [] for p in processors}

    for stream_key, frames in streams.items():
        frames = list(frames)
        row: Dict[str, Any] = {"stream_key": stream_key}

        for proc in processors:
            proc_params = {**params_global, **params_by_processor.get(proc.name, {})}
            proc_results, proc_state = proc.run(frames, proc_params)

            proc_state = dict(proc_state)
            proc_state["stream_key"] = stream_key

            row.update(_flatten_with_namespace(proc.name, proc_results))
            states_by_processor[proc.name].append(proc_state)

        logger.debug("stream %s: %d frame(s) processed", stream_key, len(frames))
        results_rows.append(row)

    # ------------------------------------------------------------------
    # Collate results into DataFrames
    # ------------------------------------------------------------------
    results_df = pd.DataFrame(results_rows)
    if not results_df.empty:
        results_df = results_df.sort_values("stream_key").reset_index(drop=True)

    states_df_by_proc: Dict[str, pd.DataFrame] = {}
    for name, rows in states_by_processor.items():
        if rows:
            df = pd.DataFrame(rows)
            df = df.sort_values("stream_key").reset_index(drop=True)
        else:
            df = pd.DataFrame()
        states_df_by_proc[name] = df

    return results_df, states_df_by_proc
