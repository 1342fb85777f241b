"""Pipeline nodes for heatmap digitization.

Imports are deferred so that importing the package does not pull in
OpenCV and SciPy until a node actually runs.
"""

from __future__ import annotations

from heatmap_digitizer.models import PipelineState


def load(state: PipelineState) -> PipelineState:
    from heatmap_digitizer.nodes.loading import load as _load

    return _load(state)


def digitize(state: PipelineState) -> PipelineState:
    from heatmap_digitizer.nodes.digitization import digitize_node as _digitize

    return _digitize(state)


def export(state: PipelineState) -> PipelineState:
    from heatmap_digitizer.nodes.exporting import export as _export

    return _export(state)


__all__ = [
    "digitize",
    "export",
    "load",
]
