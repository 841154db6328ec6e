"""Reduction backends.

A reducer owns one exclusive converter session for the whole run. The core
only ever calls ``reduce`` between entering and leaving the session, one file
at a time.
"""

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

import fitz  # PyMuPDF

from .errors import ReductionError

logger = logging.getLogger(__name__)


class Reducer(ABC):
    """
    Port to an external converter that shrinks one PDF into another.

    Use as a context manager; the session is always closed on exit, even
    when the run is aborted by an error.
    """

    def __enter__(self) -> "Reducer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """Acquire the converter session."""

    def close(self) -> None:
        """Release the converter session and everything it still holds."""

    @abstractmethod
    def reduce(self, source_path: Path) -> Path:
        """
        Produce a reduced copy of a PDF.

        Args:
            source_path: PDF to reduce

        Returns:
            Path of a temporary artifact; the caller moves or discards it

        Raises:
            ReductionError: The converter failed for any reason
        """


class FitzReducer(Reducer):
    """
    Reducer backed by PyMuPDF.

    Every page of the source is extracted into a fresh document which is then
    saved with garbage collection and stream compression. Unused objects,
    stale revisions and uncompressed streams are dropped along the way.
    """

    def __init__(self, work_dir: Optional[Union[str, Path]] = None):
        """
        Initialize reducer.

        Args:
            work_dir: Directory for temporary artifacts (default: a fresh
                temporary directory per session)
        """
        self._requested_work_dir = Path(work_dir) if work_dir else None
        self._work_dir: Optional[Path] = None
        self._owns_work_dir = False
        self._documents: List[fitz.Document] = []
        self._counter = 0

    @property
    def started(self) -> bool:
        return self._work_dir is not None

    def start(self) -> None:
        if self.started:
            return
        if self._requested_work_dir:
            self._requested_work_dir.mkdir(parents=True, exist_ok=True)
            self._work_dir = self._requested_work_dir
        else:
            self._work_dir = Path(tempfile.mkdtemp(prefix="pdfreducer_"))
            self._owns_work_dir = True
        logger.debug("Converter session started in %s", self._work_dir)

    def close(self) -> None:
        self._close_all_documents()
        if self._work_dir and self._owns_work_dir:
            shutil.rmtree(self._work_dir, ignore_errors=True)
        if self._work_dir:
            logger.debug("Converter session closed")
        self._work_dir = None
        self._owns_work_dir = False

    def reduce(self, source_path: Path) -> Path:
        if not self.started:
            raise RuntimeError("Converter session is not started.")

        self._counter += 1
        artifact = self._work_dir / f"reduced_{self._counter}.pdf"

        try:
            source = self._open(source_path)
            try:
                target = self._extract_all_pages(source)
                try:
                    self._save_as(target, artifact)
                finally:
                    self._close_document(target)
            finally:
                self._close_document(source)
        except Exception as e:
            # Leave the session clean for the next file
            self._close_all_documents()
            artifact.unlink(missing_ok=True)
            raise ReductionError(source_path) from e

        logger.debug(
            "Reduced '%s' to %d bytes", source_path, artifact.stat().st_size
        )
        return artifact

    def _open(self, path: Path) -> fitz.Document:
        doc = fitz.open(str(path), filetype="pdf")
        self._documents.append(doc)
        if doc.needs_pass:
            raise ValueError("Document is password protected.")
        if doc.page_count == 0:
            raise ValueError("Document has no pages.")
        return doc

    def _extract_all_pages(self, source: fitz.Document) -> fitz.Document:
        target = fitz.open()
        self._documents.append(target)
        target.insert_pdf(source)
        return target

    def _save_as(self, doc: fitz.Document, path: Path) -> None:
        doc.save(
            str(path),
            garbage=4,  # Maximum garbage collection
            deflate=True,  # Compress streams
            clean=True,  # Clean content streams
            deflate_images=True,
            deflate_fonts=True,
        )

    def _close_document(self, doc: fitz.Document) -> None:
        if doc in self._documents:
            self._documents.remove(doc)
        if not doc.is_closed:
            doc.close()

    def _close_all_documents(self) -> None:
        while self._documents:
            self._close_document(self._documents[-1])
