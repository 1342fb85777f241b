"""Nearest-color lookup over colorbar samples via a 3-D k-d tree."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial import cKDTree

from heatmap_digitizer import config
from heatmap_digitizer.models import ColorMap, ErrorType, ProcessingError, ProcessingStage


def _as_points(colors: ArrayLike) -> NDArray[np.float64]:
    return np.asarray(colors, dtype=np.float64).reshape(-1, 3)


class ColorIndex:
    """
    Immutable nearest-neighbor index from RGB color to calibrated value.

    Identical colors are collapsed at build time keeping their first
    occurrence, so the tree only holds distinct colors and each one maps to
    the value of the earliest sample that produced it. Among equidistant
    candidates the earliest sample wins, which keeps repeated runs
    bit-identical.

    Safe to share across threads once built.
    """

    def __init__(
        self,
        tree: cKDTree,
        values: NDArray[np.float64],
        sample_count: int,
        max_distance: float | None = None,
    ) -> None:
        self._tree = tree
        self._values = values
        self._sample_count = sample_count
        self._max_distance = max_distance

    @classmethod
    def build(
        cls,
        color_map: ColorMap,
        max_distance: float | None = config.DEFAULT_MAX_COLOR_DISTANCE,
    ) -> ColorIndex | ProcessingError:
        """
        Build the index once for a calibration run.

        Args:
            color_map: Calibrated colorbar samples
            max_distance: Queries with no sample closer than this color
                distance resolve to NaN; None matches every query

        Returns:
            ColorIndex or ProcessingError (empty_color_map)
        """
        if len(color_map) == 0:
            return ProcessingError(
                stage=ProcessingStage.INDEX,
                error_type=ErrorType.EMPTY_COLOR_MAP,
                message="Colorbar calibration produced no samples",
                details={"y_lo": color_map.y_lo, "y_hi": color_map.y_hi},
            )

        colors = color_map.colors()
        values = color_map.values()
        _, first_idx = np.unique(colors, axis=0, return_index=True)
        keep = np.sort(first_idx)

        tree = cKDTree(colors[keep])
        return cls(tree, values[keep], sample_count=len(color_map), max_distance=max_distance)

    @property
    def sample_count(self) -> int:
        return self._sample_count

    @property
    def unique_count(self) -> int:
        return int(self._values.shape[0])

    def query(self, colors: ArrayLike) -> NDArray[np.float64]:
        """Values for an ``(N, 3)`` array of normalized colors."""
        points = _as_points(colors)
        out = np.full(points.shape[0], np.nan, dtype=np.float64)
        if points.shape[0] == 0:
            return out

        n = self.unique_count
        k = min(config.TIE_CANDIDATES, n)
        upper = np.inf if self._max_distance is None else self._max_distance
        dist, idx = self._tree.query(points, k=k, distance_upper_bound=upper)
        if k == 1:
            dist = dist[:, None]
            idx = idx[:, None]

        # Misses come back as (inf, n) and stay NaN.
        tied = dist == dist[:, :1]
        best = np.where(tied, idx, n).min(axis=1)
        found = best < n
        out[found] = self._values[best[found]]
        return out

    def nearest(self, color: Sequence[float] | ArrayLike) -> float:
        return float(self.query(color)[0])


def linear_scan_nearest(
    color_map: ColorMap,
    colors: ArrayLike,
    max_distance: float | None = None,
) -> NDArray[np.float64]:
    """
    O(n) per-query reference lookup with the same tie-breaking as ColorIndex.

    Only meant for small inputs (verification against the tree).
    """
    points = _as_points(colors)
    samples = color_map.colors()
    out = np.full(points.shape[0], np.nan, dtype=np.float64)
    if samples.shape[0] == 0 or points.shape[0] == 0:
        return out

    sq = ((points[:, None, :] - samples[None, :, :]) ** 2).sum(axis=2)
    best = np.argmin(sq, axis=1)  # first minimum = earliest sample
    found = np.ones(points.shape[0], dtype=bool)
    if max_distance is not None:
        found = sq[np.arange(points.shape[0]), best] < max_distance**2
    out[found] = color_map.values()[best[found]]
    return out
