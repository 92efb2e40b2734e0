"""
Co-occurrence and decomposition pipeline.

Stages run strictly in order, each consuming the previous stage's output:

    LOAD -> TRANSPOSE -> COOCCUR -> EXPORT_COOCCUR -> DECOMPOSE -> EXPORT_RESULTS

There is no branching and no retry. The first failing stage is logged and
its exception propagates unchanged, aborting the run.

Orientation: the input has one row per document whose indices are term
ids. It is transposed into a term x document matrix ``T`` and the
co-occurrence matrix is ``T . T^t`` (term x term), so entry ``(i, j)``
sums the joint weight of terms ``i`` and ``j`` over all documents.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ._config import DecomposeConfig, SpectralMapConfig
from ._errors import ConfigurationError, check_outcome
from .io import read_sparse_matrix, write_dense_matrix
from .solver import DecompositionResult, Solver, make_svds_solver
from .sparse import (
    SparseMatrix,
    export_decomposition,
    iter_dense_rows,
    multiply_with_transpose,
    to_compressed_column,
    to_dense_matrix,
    transpose,
)

__all__ = [
    "Stage",
    "StageReport",
    "DecomposePaths",
    "PipelineResult",
    "DecomposePipeline",
    "build_cooccurrence",
    "run_decompose",
]

logger = logging.getLogger("spectralmap.pipeline")

PathLike = Union[str, "os.PathLike[str]"]


class Stage(IntEnum):
    """Pipeline stages in execution order."""
    LOAD = 0
    TRANSPOSE = 1
    COOCCUR = 2
    EXPORT_COOCCUR = 3
    DECOMPOSE = 4
    EXPORT_RESULTS = 5


@dataclass
class StageReport:
    """Summary of one completed stage."""
    stage: Stage
    shape: Tuple[int, int] = (0, 0)
    nnz: int = 0
    seconds: float = 0.0


@dataclass(frozen=True)
class DecomposePaths:
    """The five files the pipeline reads and writes."""

    term_document: PathLike
    cooccurrence: PathLike
    left_vectors: PathLike
    right_vectors: PathLike
    singular_values: PathLike

    @classmethod
    def from_args(cls, args: Sequence[PathLike]) -> "DecomposePaths":
        """Build from positional arguments.

        Raises:
            ConfigurationError: Unless exactly five paths are given.
        """
        if len(args) != 5:
            raise ConfigurationError(
                f"There were {len(args)} arguments, instead of the expected 5."
            )
        return cls(*args)


@dataclass
class PipelineResult:
    """Everything a completed run produced."""
    paths: DecomposePaths
    cooccurrence: SparseMatrix
    decomposition: DecompositionResult
    reports: List[StageReport] = field(default_factory=list)


def build_cooccurrence(term_document: SparseMatrix) -> SparseMatrix:
    """Term x term co-occurrence matrix of a document x term matrix."""
    terms = transpose(term_document)
    return check_outcome(multiply_with_transpose(terms, terms), "co-occurrence")


class DecomposePipeline:
    """Runs the co-occurrence + SVD stages with an explicit configuration.

    Args:
        config: Pipeline settings; defaults to ``DecomposeConfig()``.
        solver: Decomposition callable; defaults to scipy's ``svds``.

    Example:
        >>> pipeline = DecomposePipeline(DecomposeConfig(rank=50))
        >>> result = pipeline.run(DecomposePaths.from_args(sys.argv[1:]))
    """

    def __init__(
        self,
        config: Optional[DecomposeConfig] = None,
        solver: Optional[Solver] = None,
    ):
        self.config = config or DecomposeConfig()
        self.config.validate()
        self.solver = solver or make_svds_solver(self.config.solver_tol)

    @contextmanager
    def _stage(self, stage: Stage, reports: List[StageReport]) -> Iterator[StageReport]:
        report = StageReport(stage)
        logger.info("Stage %s started", stage.name)
        start = time.perf_counter()
        try:
            yield report
        except Exception:
            logger.error("Stage %s failed", stage.name)
            raise
        report.seconds = time.perf_counter() - start
        reports.append(report)
        logger.info(
            "Stage %s finished: shape=%s nnz=%d (%.3fs)",
            stage.name, report.shape, report.nnz, report.seconds,
        )

    def run(self, paths: DecomposePaths) -> PipelineResult:
        cfg = self.config
        reports: List[StageReport] = []

        with self._stage(Stage.LOAD, reports) as report:
            documents = read_sparse_matrix(paths.term_document, cfg.index_base)
            report.shape, report.nnz = documents.shape, documents.nnz

        with self._stage(Stage.TRANSPOSE, reports) as report:
            terms = transpose(documents)
            report.shape, report.nnz = terms.shape, terms.nnz
        del documents

        with self._stage(Stage.COOCCUR, reports) as report:
            cooccurrence = check_outcome(
                multiply_with_transpose(terms, terms), "co-occurrence"
            )
            report.shape, report.nnz = cooccurrence.shape, cooccurrence.nnz
        del terms

        with self._stage(Stage.EXPORT_COOCCUR, reports) as report:
            if cfg.stream_dense_export:
                rows = iter_dense_rows(cooccurrence)
            else:
                rows = to_dense_matrix(cooccurrence)
            write_dense_matrix(rows, paths.cooccurrence, cfg.delimiter)
            report.shape, report.nnz = cooccurrence.shape, cooccurrence.nnz
            del rows

        with self._stage(Stage.DECOMPOSE, reports) as report:
            compressed = to_compressed_column(cooccurrence)
            logger.info("Converted matrix to compressed-column layout")
            decomposition = self.solver(compressed, cfg.rank)
            decomposition.validate(compressed.shape)
            report.shape, report.nnz = compressed.shape, compressed.nnz
            del compressed

        with self._stage(Stage.EXPORT_RESULTS, reports) as report:
            export_decomposition(
                decomposition,
                paths.left_vectors,
                paths.right_vectors,
                paths.singular_values,
                cfg.delimiter,
            )
            report.shape = (decomposition.rank, 3)

        return PipelineResult(paths, cooccurrence, decomposition, reports)


def run_decompose(
    args: Sequence[PathLike],
    config: Optional[SpectralMapConfig] = None,
    solver: Optional[Solver] = None,
) -> PipelineResult:
    """Validate the five paths, then run the whole pipeline."""
    paths = DecomposePaths.from_args(args)
    config = config or SpectralMapConfig()
    return DecomposePipeline(config.decompose, solver).run(paths)
