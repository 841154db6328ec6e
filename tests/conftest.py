import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pdfreducer.errors import ReductionError
from pdfreducer.reducer import Reducer


class FakeReducer(Reducer):
    """
    In-memory stand-in for the converter.

    ``results`` maps a source file name to the size of the artifact to
    produce, or to an exception to fail with. Unlisted files shrink by half.
    """

    def __init__(self, work_dir: Path, results: Optional[Dict[str, Union[int, Exception]]] = None):
        self.work_dir = work_dir
        self.results = results or {}
        self.calls: List[Path] = []
        self.artifacts: List[Path] = []
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True
        self.work_dir.mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        self.closed = True

    def reduce(self, source_path: Path) -> Path:
        source_path = Path(source_path)
        self.calls.append(source_path)

        result = self.results.get(source_path.name)
        if isinstance(result, Exception):
            raise ReductionError(source_path) from result

        size = result if result is not None else source_path.stat().st_size // 2
        artifact = self.work_dir / f"artifact_{len(self.calls)}.pdf"
        artifact.write_bytes(b"r" * size)
        self.artifacts.append(artifact)
        return artifact


def _write_file(path: Path, size: int, fill: bytes = b"x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(fill * size)
    return path


@pytest.fixture
def write_file():
    """Write a file of `size` repeated `fill` bytes, creating parents."""
    return _write_file


@pytest.fixture
def make_reducer(tmp_path):
    """Build a started FakeReducer with per-file results."""
    def factory(results=None) -> FakeReducer:
        reducer = FakeReducer(tmp_path / "_artifacts", results)
        reducer.start()
        return reducer
    return factory


@pytest.fixture
def source_tree(tmp_path):
    """
    in/
      a.pdf            1000 bytes
      notes.txt        ignored
      sub/b.PDF        400 bytes
      sub/deep/c.pdf   200 bytes
      empty/
    """
    root = tmp_path / "in"
    _write_file(root / "a.pdf", 1000)
    _write_file(root / "notes.txt", 50)
    _write_file(root / "sub" / "b.PDF", 400)
    _write_file(root / "sub" / "deep" / "c.pdf", 200)
    (root / "empty").mkdir()
    return root
