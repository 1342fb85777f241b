"""LangGraph pipeline for heatmap digitization."""

from pathlib import Path

from langgraph.graph import END, StateGraph

from heatmap_digitizer.models import (
    CalibrationInput,
    PipelineConfig,
    PipelineState,
    ProcessingStage,
)
from heatmap_digitizer.nodes.digitization import digitize_node
from heatmap_digitizer.nodes.exporting import export
from heatmap_digitizer.nodes.loading import load


def _has_fatal_error(state: PipelineState, stage: ProcessingStage) -> bool:
    return any(err.stage == stage and not err.recoverable for err in state.errors)


def _route_load(state: PipelineState) -> str:
    if _has_fatal_error(state, ProcessingStage.LOAD):
        return END
    if state.image is not None:
        return "digitize"
    return END


def _route_digitize(state: PipelineState) -> str:
    # Any digitizer stage failing ends the run before anything is written.
    if any(not err.recoverable for err in state.errors):
        return END
    if state.matrix is not None and state.output_path:
        return "export"
    return END


def create_pipeline():
    graph = StateGraph(PipelineState)

    graph.add_node("load", load)
    graph.add_node("digitize", digitize_node)
    graph.add_node("export", export)

    graph.set_entry_point("load")

    graph.add_conditional_edges("load", _route_load, {"digitize": "digitize", END: END})
    graph.add_conditional_edges("digitize", _route_digitize, {"export": "export", END: END})
    graph.add_edge("export", END)

    return graph.compile()


def _initial_state(
    image_path: str | Path,
    calibration: CalibrationInput,
    output_path: str | Path | None,
    config: PipelineConfig | None,
) -> PipelineState:
    return PipelineState(
        image_path=str(image_path),
        calibration=calibration,
        output_path=str(output_path) if output_path is not None else None,
        config=config or PipelineConfig(),
    )


def run_pipeline(
    image_path: str | Path,
    calibration: CalibrationInput,
    output_path: str | Path | None = None,
    config: PipelineConfig | None = None,
) -> PipelineState:
    initial = _initial_state(image_path, calibration, output_path, config)
    result = pipeline.invoke(initial)
    return result if isinstance(result, PipelineState) else PipelineState(**result)


async def run_pipeline_async(
    image_path: str | Path,
    calibration: CalibrationInput,
    output_path: str | Path | None = None,
    config: PipelineConfig | None = None,
) -> PipelineState:
    """Async runner; nodes execute off the event loop so images can overlap."""
    initial = _initial_state(image_path, calibration, output_path, config)
    result = await pipeline.ainvoke(initial)
    return result if isinstance(result, PipelineState) else PipelineState(**result)


pipeline = create_pipeline()
