"""Delimited-text export of the result matrix."""

import os
import stat
import tempfile
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike

from heatmap_digitizer import config
from heatmap_digitizer.models import ErrorType, PipelineState, ProcessingError, ProcessingStage


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# mkstemp files are 0600; new outputs get 0666 & ~umask like open() would
_DEFAULT_MODE = 0o666 & ~_current_umask()


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return _DEFAULT_MODE


def format_matrix(matrix: ArrayLike, delimiter: str = config.DEFAULT_DELIMITER) -> str:
    """
    Render rows as lines and cells joined by ``delimiter``.

    Cells use the shortest round-trip float text, so NaN is written as
    ``nan`` exactly like any other value. No trailing newline.
    """
    rows = np.asarray(matrix, dtype=np.float64)
    if rows.ndim != 2:
        raise ValueError(f"expected a 2-D matrix, got {rows.ndim} dimensions")
    return "\n".join(delimiter.join(repr(float(v)) for v in row) for row in rows)


def write_matrix(
    matrix: ArrayLike,
    destination: str | Path,
    delimiter: str = config.DEFAULT_DELIMITER,
    stage: ProcessingStage = ProcessingStage.EXPORT,
) -> Path | ProcessingError:
    """
    Write the matrix atomically: temp file in the target directory, then replace.

    An existing file at ``destination`` is either fully replaced or left
    untouched, and its permission bits carry over to the new contents.

    Returns:
        Path to the written file or ProcessingError (write_failure)
    """
    path = Path(destination)
    text = format_matrix(matrix, delimiter)
    tmp_name: str | None = None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
        tmp_name = None
        return path

    except PermissionError as e:
        return ProcessingError(
            stage=stage,
            error_type=ErrorType.WRITE_FAILURE,
            message=f"Permission denied writing: {path}",
            details={"path": str(path), "error": str(e)},
        )
    except OSError as e:
        return ProcessingError(
            stage=stage,
            error_type=ErrorType.WRITE_FAILURE,
            message=f"Error writing matrix: {e}",
            details={"path": str(path), "error": str(e)},
        )
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


def export(state: PipelineState) -> PipelineState:
    """Graph node: write the matrix to ``state.output_path``."""
    if state.matrix is None or state.output_path is None:
        return state

    result = write_matrix(state.matrix, state.output_path, delimiter=state.config.delimiter)
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [result]})
    return state.model_copy(update={"written_path": str(result)})
