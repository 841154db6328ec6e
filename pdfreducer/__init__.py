"""
PDF Reducer

Batch-reduces a tree of PDF files through an external converter and decides,
per file, whether to keep the reduced result, fall back to the original or
abort the run.
"""

__version__ = "1.0.0"
__author__ = "PDF Reducer Team"

from .accounting import RunTotals, aggregate
from .errors import PDFReducerError, ReductionError, TargetExistsError
from .outcomes import FileOutcome, OutcomeKind, SizePair, classify
from .policy import Policy
from .processor import process_file
from .reducer import FitzReducer, Reducer
from .walker import reduce_path, walk_tree

__all__ = [
    "RunTotals",
    "aggregate",
    "PDFReducerError",
    "ReductionError",
    "TargetExistsError",
    "FileOutcome",
    "OutcomeKind",
    "SizePair",
    "classify",
    "Policy",
    "process_file",
    "FitzReducer",
    "Reducer",
    "reduce_path",
    "walk_tree",
]
