"""CLI for heatmap digitization with concurrent processing."""

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from heatmap_digitizer import config
from heatmap_digitizer.models import CalibrationInput, PipelineConfig, PipelineState
from heatmap_digitizer.pipeline import run_pipeline_async

PointOption = tuple[int, int] | None


async def process_single_image(
    img_path: Path,
    out_path: Path,
    calibration: CalibrationInput,
    pipeline_config: PipelineConfig,
    semaphore: asyncio.Semaphore,
    verbose: bool,
) -> tuple[Path, PipelineState | None, Exception | None]:
    """Process a single image with semaphore control."""
    async with semaphore:
        if verbose:
            click.echo(f"Processing: {img_path}")
        try:
            state = await run_pipeline_async(img_path, calibration, out_path, pipeline_config)
            return (img_path, state, None)
        except Exception as e:
            return (img_path, None, e)


async def process_images_concurrent(
    jobs: list[tuple[Path, Path]],
    calibration: CalibrationInput,
    pipeline_config: PipelineConfig,
    max_concurrency: int,
    verbose: bool,
) -> AsyncIterator[tuple[Path, PipelineState | None, Exception | None]]:
    """Process images with a bounded in-flight queue and stream completed results."""
    semaphore = asyncio.Semaphore(max_concurrency)
    job_iter = iter(jobs)
    in_flight: set[asyncio.Task[tuple[Path, PipelineState | None, Exception | None]]] = set()

    def _schedule_next() -> bool:
        try:
            img_path, out_path = next(job_iter)
        except StopIteration:
            return False
        task = asyncio.create_task(
            process_single_image(
                img_path, out_path, calibration, pipeline_config, semaphore, verbose
            )
        )
        in_flight.add(task)
        return True

    for _ in range(min(max_concurrency, len(jobs))):
        _schedule_next()

    while in_flight:
        done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
        for completed in done:
            in_flight.remove(completed)
            yield completed.result()
            _schedule_next()


def build_calibration(
    calibration_file: Path | None,
    points: dict[str, PointOption],
    values: dict[str, float | None],
) -> CalibrationInput:
    """Merge a JSON calibration file with command-line overrides."""
    data: dict[str, Any] = {}
    if calibration_file is not None:
        data = json.loads(calibration_file.read_text())
    data.update({name: list(pt) for name, pt in points.items() if pt is not None})
    data.update({name: v for name, v in values.items() if v is not None})
    return CalibrationInput.model_validate(data)


@click.command()
@click.argument("images", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--calibration",
    "calibration_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with calibration points and values",
)
@click.option("--origin", type=(int, int), default=None, help="Plot origin corner (pixels)")
@click.option("--x-extent", type=(int, int), default=None, help="Corner on the far x edge")
@click.option("--y-extent", type=(int, int), default=None, help="Corner on the far y edge")
@click.option("--colorbar-low", type=(int, int), default=None, help="Colorbar point for --value-low")
@click.option(
    "--colorbar-high", type=(int, int), default=None, help="Colorbar point for --value-high"
)
@click.option("--value-low", type=float, default=None, help="Value at --colorbar-low")
@click.option("--value-high", type=float, default=None, help="Value at --colorbar-high")
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output CSV file (single image)",
)
@click.option("--output-dir", type=click.Path(path_type=Path), help="Output directory (batch mode)")
@click.option(
    "--max-concurrency",
    type=int,
    default=config.DEFAULT_MAX_CONCURRENCY,
    help="Max concurrent image processing",
)
@click.option(
    "--workers",
    type=int,
    default=config.DEFAULT_MAX_WORKERS,
    help="Lookup threads per image",
)
@click.option(
    "--rows-per-batch",
    type=int,
    default=config.DEFAULT_ROWS_PER_BATCH,
    help="Pixel rows per lookup batch",
)
@click.option(
    "--max-color-distance",
    type=float,
    default=config.DEFAULT_MAX_COLOR_DISTANCE,
    help="Write NaN for pixels farther than this from every colorbar color",
)
@click.option(
    "--origin-corner",
    type=click.Choice(["any", "bottom_left", "top_left"]),
    default=config.DEFAULT_ORIGIN_CORNER,
    help="Which plot corner the origin click marks",
)
@click.option("--delimiter", default=config.DEFAULT_DELIMITER, help="Cell delimiter")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def main(
    images: tuple[Path, ...],
    calibration_file: Path | None,
    origin: PointOption,
    x_extent: PointOption,
    y_extent: PointOption,
    colorbar_low: PointOption,
    colorbar_high: PointOption,
    value_low: float | None,
    value_high: float | None,
    output: Path | None,
    output_dir: Path | None,
    max_concurrency: int,
    workers: int,
    rows_per_batch: int,
    max_color_distance: float | None,
    origin_corner: str,
    delimiter: str,
    verbose: bool,
) -> None:
    """Convert heatmap images into CSV matrices of values."""
    if not images:
        click.echo("Error: No input images provided", err=True)
        sys.exit(1)

    batch = len(images) > 1 or output_dir is not None

    if batch and output:
        click.echo("Error: Use --output-dir for batch processing", err=True)
        sys.exit(1)
    if max_concurrency < 1:
        click.echo("Error: --max-concurrency must be >= 1", err=True)
        sys.exit(1)

    try:
        calibration = build_calibration(
            calibration_file,
            points={
                "corner_origin": origin,
                "corner_x_extent": x_extent,
                "corner_y_extent": y_extent,
                "colorbar_low": colorbar_low,
                "colorbar_high": colorbar_high,
            },
            values={"value_low": value_low, "value_high": value_high},
        )
        pipeline_config = PipelineConfig(
            max_workers=workers,
            rows_per_batch=rows_per_batch,
            max_color_distance=max_color_distance,
            origin_corner=origin_corner,
            delimiter=delimiter,
        )
    except (ValidationError, json.JSONDecodeError) as e:
        click.echo(f"Error: Invalid calibration or options:\n{e}", err=True)
        sys.exit(1)

    if output_dir:
        output_dir.mkdir(parents=True, exist_ok=True)

    jobs: list[tuple[Path, Path]] = []
    for img_path in images:
        if batch:
            out_path = (output_dir or img_path.parent) / f"{img_path.stem}{config.OUTPUT_SUFFIX}"
        else:
            out_path = output or Path(f"{img_path.stem}{config.OUTPUT_SUFFIX}")
        jobs.append((img_path, out_path))

    async def _run() -> tuple[int, int]:
        success_count = 0
        fail_count = 0

        async for img_path, state, error in process_images_concurrent(
            jobs, calibration, pipeline_config, max_concurrency, verbose
        ):
            if error:
                fail_count += 1
                click.echo(f"Error processing {img_path}: {error}", err=True)
                continue

            if verbose and state:
                for w in state.warnings:
                    click.echo(f"  {w}")

            if state and state.written_path and not state.errors:
                success_count += 1
                if verbose and state.matrix is not None:
                    rows, cols = state.matrix.shape
                    click.echo(f"  Output: {state.written_path} ({rows}x{cols})")
            else:
                fail_count += 1
                click.echo(f"Error processing {img_path}:", err=True)
                if state:
                    for e in state.errors:
                        click.echo(f"  [{e.stage.value}] {e.message}", err=True)

        return success_count, fail_count

    success_count, fail_count = asyncio.run(_run())

    if batch:
        click.echo(
            f"Processed {success_count + fail_count} images: "
            f"{success_count} success, {fail_count} failed"
        )

    if fail_count > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
