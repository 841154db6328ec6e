"""Outcome classification for reduced PDF files."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .policy import Policy
from .utils import get_all_messages


class OutcomeKind(Enum):
    """How the processing of a single file concluded."""
    REDUCED = "reduced"
    KEPT_ORIGINAL_SIZE_REGRESSION = "kept_original_size_regression"
    KEPT_ORIGINAL_RESULT_BIGGER = "kept_original_result_bigger"
    COPIED_AFTER_ERROR = "copied_after_error"
    SKIPPED_AFTER_ERROR = "skipped_after_error"
    SKIPPED_ALREADY_EXISTS = "skipped_already_exists"

    @property
    def writes_reduced(self) -> bool:
        """The reduced document ends up at the target path."""
        return self in (OutcomeKind.REDUCED, OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER)

    @property
    def writes_original(self) -> bool:
        """The source document is copied to the target path."""
        return self in (
            OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION,
            OutcomeKind.COPIED_AFTER_ERROR,
        )

    @property
    def guarded_by_fail_if_exists(self) -> bool:
        """Replacing an existing target for this outcome honours fail_if_exists."""
        return self in (
            OutcomeKind.REDUCED,
            OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER,
            OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION,
        )


@dataclass(frozen=True)
class SizePair:
    """Byte counts before and after processing a file or a whole subtree."""
    before: int = 0
    after: int = 0

    def __add__(self, other: "SizePair") -> "SizePair":
        if not isinstance(other, SizePair):
            return NotImplemented
        return SizePair(self.before + other.before, self.after + other.after)


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing a single PDF file."""
    kind: OutcomeKind
    source_path: Path
    target_path: Path
    sizes: SizePair
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> Optional[str]:
        return get_all_messages(self.error)

    @property
    def reason(self) -> Optional[str]:
        """Short explanation shown next to the file, None for a plain reduction."""
        if self.kind is OutcomeKind.SKIPPED_ALREADY_EXISTS:
            return "skipped because it already exists"
        if self.kind is OutcomeKind.COPIED_AFTER_ERROR:
            return f"copied as is after error: {self.error_message}"
        if self.kind is OutcomeKind.SKIPPED_AFTER_ERROR:
            return f"skipped after error: {self.error_message}"
        if self.kind is OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION:
            return "not reduced, was kept as is"
        if self.kind is OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER:
            return "result size is bigger"
        return None

    def describe(self) -> str:
        """One line describing what happened to the file."""
        if self.kind is OutcomeKind.SKIPPED_AFTER_ERROR:
            line = f"'{self.source_path}'"
        else:
            line = f"'{self.source_path}' => '{self.target_path}'"
        if self.reason:
            line += f" ({self.reason})"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "outcome": self.kind.value,
            "source_path": str(self.source_path),
            "target_path": str(self.target_path),
            "size_before": self.sizes.before,
            "size_after": self.sizes.after,
            "error": self.error_message,
        }


def skips_existing(target_exists: bool, policy: Policy) -> bool:
    """
    Whether an existing target means the file is not converted at all.

    Args:
        target_exists: The target exists and is not empty
        policy: Run policy

    Returns:
        True if the source should be left alone
    """
    return target_exists and policy.skip_existing


def classify(
    original_size: int,
    reduced_size: Optional[int],
    error: Optional[BaseException],
    target_exists: bool,
    policy: Policy,
) -> OutcomeKind:
    """
    Decide what to do with the result of reducing one file.

    Args:
        original_size: Size of the source file in bytes
        reduced_size: Size of the reduced artifact, None if reduction failed
        error: The reduction failure, if any
        target_exists: The target exists and is not empty
        policy: Run policy

    Returns:
        The outcome to carry out
    """
    if skips_existing(target_exists, policy):
        return OutcomeKind.SKIPPED_ALREADY_EXISTS

    if error is not None or reduced_size is None:
        if policy.dont_copy_on_error:
            return OutcomeKind.SKIPPED_AFTER_ERROR
        return OutcomeKind.COPIED_AFTER_ERROR

    # Equal sizes count as a successful reduction
    if reduced_size > original_size:
        if policy.always_rewrite:
            return OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER
        return OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION

    return OutcomeKind.REDUCED
