"""Directory traversal mirroring a source tree onto a target tree."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .outcomes import SizePair
from .policy import Policy
from .processor import OutcomeCallback, process_file
from .reducer import Reducer
from .utils import full_path, paths_equal, same_location

logger = logging.getLogger(__name__)

MANAGED_EXTENSION = ".pdf"


def is_managed(path: Path) -> bool:
    """Check if a file name has the managed document extension."""
    return path.suffix.lower() == MANAGED_EXTENSION


def _scan(directory: Path) -> Tuple[List[Path], List[Path]]:
    """Split a directory's entries into managed files and subdirectories."""
    files: List[Path] = []
    subdirs: List[Path] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(path)
            elif entry.is_file() and is_managed(path):
                files.append(path)
    return files, subdirs


def walk_tree(
    source_dir: Union[str, Path],
    target_dir: Union[str, Path],
    policy: Policy,
    reducer: Reducer,
    on_outcome: Optional[OutcomeCallback] = None,
    exclude_dir: Optional[Union[str, Path]] = None,
) -> SizePair:
    """
    Reduce every PDF below a directory into a mirrored target directory.

    Files of a directory are processed before its subdirectories. Target
    directories are only created when a file is written into them.

    Args:
        source_dir: Directory to walk
        target_dir: Directory mirroring source_dir
        policy: Run policy
        reducer: Active reducer session
        on_outcome: Optional callback receiving each FileOutcome
        exclude_dir: Subdirectory not to descend into (e.g. the output
            directory when it lives inside the source tree)

    Returns:
        Summed SizePair of every processed file
    """
    total = SizePair()
    stack = [(Path(source_dir), Path(target_dir))]

    while stack:
        source, target = stack.pop()
        logger.debug("Scanning %s", source)
        files, subdirs = _scan(source)

        for file in files:
            total += process_file(file, target / file.name, policy, reducer, on_outcome)

        # Reversed so the stack pops them in enumeration order
        for subdir in reversed(subdirs):
            if exclude_dir is not None and same_location(subdir, exclude_dir):
                logger.debug("Not descending into output directory %s", subdir)
                continue
            stack.append((subdir, target / subdir.name))

    return total


def reduce_path(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    policy: Policy,
    reducer: Reducer,
    on_outcome: Optional[OutcomeCallback] = None,
) -> SizePair:
    """
    Reduce a PDF file or a whole directory tree.

    - input is a directory: walk it, mirroring into output_path
    - input is a file and output_path an existing directory: write
      output_path/<file name>
    - otherwise: output_path is the target file

    Args:
        input_path: PDF file or directory
        output_path: Target file or directory
        policy: Run policy
        reducer: Active reducer session
        on_outcome: Optional callback receiving each FileOutcome

    Returns:
        Summed SizePair of every processed file

    Raises:
        ValueError: input and output paths are the same
    """
    input_path = full_path(input_path)
    output_path = full_path(output_path)
    if paths_equal(input_path, output_path):
        raise ValueError("Input and output paths must be different.")

    if input_path.is_dir():
        return walk_tree(
            input_path, output_path, policy, reducer, on_outcome,
            exclude_dir=output_path,
        )

    if output_path.is_dir():
        return process_file(
            input_path, output_path / input_path.name, policy, reducer, on_outcome
        )

    return process_file(input_path, output_path, policy, reducer, on_outcome)
