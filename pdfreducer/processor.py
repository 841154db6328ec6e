"""Single-file processing: reduce, classify and put the result in place."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import ReductionError, TargetExistsError
from .outcomes import FileOutcome, OutcomeKind, SizePair, classify, skips_existing
from .policy import Policy
from .reducer import Reducer
from .utils import ensure_parent, file_size, get_all_messages

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[FileOutcome], None]


def temp_path(target: Path) -> Path:
    """Create an empty, uniquely named staging file next to the target."""
    fd, name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
    )
    os.close(fd)
    return Path(name)


def install_file(source: Path, target: Path, move: bool = False) -> None:
    """
    Put a file at the target path, replacing whatever is there.

    The data is written to a fresh staging file next to the target first and
    renamed into place, so a failed write never leaves a truncated target
    behind and never touches any other existing file.

    Args:
        source: File to install
        target: Final location
        move: Remove the source once it is in place
    """
    ensure_parent(target)
    tmp = temp_path(target)
    try:
        shutil.copy2(source, tmp)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    if move:
        Path(source).unlink(missing_ok=True)


def _exists_non_empty(path: Path) -> bool:
    return path.is_file() and file_size(path) != 0


def process_file(
    source_path: Union[str, Path],
    target_path: Union[str, Path],
    policy: Policy,
    reducer: Reducer,
    on_outcome: Optional[OutcomeCallback] = None,
) -> SizePair:
    """
    Reduce one PDF into its target path according to the policy.

    Reduction failures are absorbed into the outcome. Overwrite conflicts
    under ``fail_if_exists`` and filesystem errors propagate.

    Args:
        source_path: PDF to reduce
        target_path: Where the result goes
        policy: Run policy
        reducer: Active reducer session
        on_outcome: Optional callback receiving the FileOutcome

    Returns:
        SizePair of the source size and the final target size

    Raises:
        TargetExistsError: Target exists and fail_if_exists is set
        OSError: Copying or writing the target failed
    """
    source_path = Path(source_path)
    target_path = Path(target_path)

    original_size = file_size(source_path)
    target_exists = _exists_non_empty(target_path)

    if skips_existing(target_exists, policy):
        outcome = FileOutcome(
            kind=OutcomeKind.SKIPPED_ALREADY_EXISTS,
            source_path=source_path,
            target_path=target_path,
            sizes=SizePair(original_size, original_size),
        )
        return _report(outcome, on_outcome)

    artifact: Optional[Path] = None
    reduced_size: Optional[int] = None
    error: Optional[ReductionError] = None
    try:
        try:
            artifact = reducer.reduce(source_path)
            reduced_size = file_size(artifact)
        except ReductionError as e:
            error = e
            logger.warning("Could not reduce '%s': %s", source_path, get_all_messages(e))

        kind = classify(original_size, reduced_size, error, target_exists, policy)

        if kind.guarded_by_fail_if_exists and target_exists and policy.fail_if_exists:
            raise TargetExistsError(target_path)

        if kind.writes_reduced:
            install_file(artifact, target_path, move=True)
        elif kind.writes_original:
            install_file(source_path, target_path)
    finally:
        if artifact is not None:
            artifact.unlink(missing_ok=True)

    if kind is OutcomeKind.SKIPPED_AFTER_ERROR:
        new_size = original_size
    else:
        new_size = file_size(target_path)

    outcome = FileOutcome(
        kind=kind,
        source_path=source_path,
        target_path=target_path,
        sizes=SizePair(original_size, new_size),
        error=error,
    )
    return _report(outcome, on_outcome)


def _report(outcome: FileOutcome, on_outcome: Optional[OutcomeCallback]) -> SizePair:
    logger.debug("%s: %s", outcome.kind.value, outcome.describe())
    if on_outcome:
        on_outcome(outcome)
    return outcome.sizes
