"""Utility functions for PDF reduction."""

import os
from pathlib import Path
from typing import Iterator, Optional, Union


def format_size(size_bytes: int) -> str:
    """
    Format bytes to human-readable string.

    Args:
        size_bytes: Size in bytes (negative values are formatted by magnitude)

    Returns:
        Human-readable size string
    """
    size_bytes = abs(size_bytes)
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.2f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def full_path(path: Union[str, Path]) -> Path:
    """Make a path absolute and normalized without resolving symlinks."""
    return Path(os.path.abspath(os.fspath(path)))


def paths_equal(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """
    Compare two paths case-insensitively after normalization.

    Args:
        first: First path
        second: Second path

    Returns:
        True if both paths name the same location
    """
    return str(full_path(first)).casefold() == str(full_path(second)).casefold()


def same_location(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """
    Check if two paths are the same file system entry.

    Falls back to an exact comparison of the normalized paths when either
    one does not exist.
    """
    try:
        return os.path.samefile(first, second)
    except OSError:
        return full_path(first) == full_path(second)


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def file_size(path: Path) -> int:
    return path.stat().st_size


def _is_group(exception: BaseException) -> bool:
    return isinstance(getattr(exception, "exceptions", None), tuple)


def iter_exception_chain(exception: Optional[BaseException]) -> Iterator[BaseException]:
    """
    Yield an exception and every exception it was raised from.

    Exception groups are expanded into their members.
    """
    seen = set()
    stack = [exception] if exception is not None else []
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        cause = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )
        if cause is not None:
            stack.append(cause)
        if _is_group(current):
            stack.extend(reversed(current.exceptions))


def _describe(exception: BaseException) -> str:
    message = str(exception).strip()
    exc_type = type(exception)
    if exc_type.__module__ == "builtins":
        return message or exc_type.__name__
    name = f"{exc_type.__module__}.{exc_type.__qualname__}"
    return f"{name}: {message}" if message else name


def get_all_messages(exception: Optional[BaseException]) -> Optional[str]:
    """
    Render an exception and all of its causes as one line.

    Parts are joined with ". ", or run straight on when the previous part
    already ends with a period; doubled periods are collapsed. Exception
    groups contribute their members only.

    Args:
        exception: The outermost exception

    Returns:
        The rendered message, or None when there is nothing to show
    """
    if exception is None:
        return None

    rendered = ""
    for current in iter_exception_chain(exception):
        if _is_group(current):
            continue
        if rendered and not rendered.endswith("."):
            rendered += ". "
        rendered += _describe(current)

    rendered = rendered.replace("..", ".").strip()
    return rendered or None
