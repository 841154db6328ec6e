"""Exceptions raised by the PDF reducer."""

from pathlib import Path


class PDFReducerError(Exception):
    """Base class for reducer errors."""


class ReductionError(PDFReducerError):
    """The reduction backend could not produce a reduced document.

    The backend's own exception is attached as ``__cause__``.
    """

    def __init__(self, source_path: Path, message: str = "Reduction failed."):
        super().__init__(f"'{source_path}': {message}")
        self.source_path = source_path


class TargetExistsError(PDFReducerError):
    """A target file exists and overwriting was forbidden. Aborts the run."""

    def __init__(self, target_path: Path):
        super().__init__(f"File '{target_path}' already exists.")
        self.target_path = target_path
