import pytest

from pdfreducer.errors import TargetExistsError
from pdfreducer.outcomes import OutcomeKind, SizePair
from pdfreducer.policy import Policy
from pdfreducer.processor import install_file, process_file, temp_path


@pytest.fixture
def source(tmp_path, write_file):
    return write_file(tmp_path / "in" / "a.pdf", 1000)


def _staging_files(target):
    return sorted(target.parent.glob("*.tmp"))


def _process(source, target, policy, reducer):
    outcomes = []
    sizes = process_file(source, target, policy, reducer, outcomes.append)
    assert len(outcomes) == 1
    return sizes, outcomes[0]


def test_reduced_file_replaces_target(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": 400})
    target = tmp_path / "out" / "nested" / "a.pdf"

    sizes, outcome = _process(source, target, Policy(), reducer)

    assert outcome.kind is OutcomeKind.REDUCED
    assert sizes == SizePair(1000, 400)
    assert target.read_bytes() == b"r" * 400
    # Artifact was consumed, no staging file left next to the target
    assert not reducer.artifacts[0].exists()
    assert _staging_files(target) == []


def test_equal_size_counts_as_reduced(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": 1000})
    target = tmp_path / "out" / "a.pdf"

    sizes, outcome = _process(source, target, Policy(), reducer)

    assert outcome.kind is OutcomeKind.REDUCED
    assert sizes == SizePair(1000, 1000)
    assert target.read_bytes() == b"r" * 1000


def test_bigger_result_keeps_original(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": 1500})
    target = tmp_path / "out" / "a.pdf"

    sizes, outcome = _process(source, target, Policy(), reducer)

    assert outcome.kind is OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION
    assert sizes == SizePair(1000, 1000)
    assert target.read_bytes() == source.read_bytes()
    assert not reducer.artifacts[0].exists()


def test_bigger_result_written_with_always_rewrite(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": 1500})
    target = tmp_path / "out" / "a.pdf"

    sizes, outcome = _process(source, target, Policy(always_rewrite=True), reducer)

    assert outcome.kind is OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER
    # The reported size is what actually sits at the target
    assert sizes == SizePair(1000, 1500)
    assert target.read_bytes() == b"r" * 1500


def test_error_copies_original_over_existing_target(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer({"a.pdf": RuntimeError("converter crashed")})
    target = write_file(tmp_path / "out" / "a.pdf", 10, b"o")

    sizes, outcome = _process(source, target, Policy(fail_if_exists=True), reducer)

    assert outcome.kind is OutcomeKind.COPIED_AFTER_ERROR
    assert sizes == SizePair(1000, 1000)
    assert target.read_bytes() == source.read_bytes()
    assert "converter crashed" in outcome.describe()


def test_error_with_dont_copy_on_error_writes_nothing(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": RuntimeError("converter crashed")})
    target = tmp_path / "out" / "a.pdf"

    sizes, outcome = _process(source, target, Policy(dont_copy_on_error=True), reducer)

    assert outcome.kind is OutcomeKind.SKIPPED_AFTER_ERROR
    assert sizes == SizePair(1000, 1000)
    assert not target.exists()
    assert not target.parent.exists()


def test_error_with_dont_copy_on_error_leaves_existing_target(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer({"a.pdf": RuntimeError("converter crashed")})
    target = write_file(tmp_path / "out" / "a.pdf", 10, b"o")

    _process(source, target, Policy(dont_copy_on_error=True), reducer)

    assert target.read_bytes() == b"o" * 10


def test_skip_existing_does_not_convert(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer()
    target = write_file(tmp_path / "out" / "a.pdf", 10, b"o")

    sizes, outcome = _process(source, target, Policy(skip_existing=True), reducer)

    assert outcome.kind is OutcomeKind.SKIPPED_ALREADY_EXISTS
    assert sizes == SizePair(1000, 1000)
    assert reducer.calls == []
    assert target.read_bytes() == b"o" * 10


def test_skip_existing_replaces_empty_target(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer({"a.pdf": 400})
    target = write_file(tmp_path / "out" / "a.pdf", 0)

    _, outcome = _process(source, target, Policy(skip_existing=True), reducer)

    assert outcome.kind is OutcomeKind.REDUCED
    assert target.stat().st_size == 400


def test_second_run_with_skip_existing_is_a_no_op(tmp_path, source, make_reducer):
    reducer = make_reducer({"a.pdf": 400})
    target = tmp_path / "out" / "a.pdf"
    policy = Policy(skip_existing=True)

    _process(source, target, policy, reducer)
    first = target.read_bytes()
    _, outcome = _process(source, target, policy, reducer)

    assert outcome.kind is OutcomeKind.SKIPPED_ALREADY_EXISTS
    assert target.read_bytes() == first
    assert len(reducer.calls) == 1


def test_existing_target_replaced_without_fail_if_exists(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer({"a.pdf": 400})
    target = write_file(tmp_path / "out" / "a.pdf", 10, b"o")

    _, outcome = _process(source, target, Policy(), reducer)

    assert outcome.kind is OutcomeKind.REDUCED
    assert target.read_bytes() == b"r" * 400


@pytest.mark.parametrize("reduced_size", [400, 1500])
def test_fail_if_exists_raises_and_keeps_target(tmp_path, source, make_reducer, reduced_size, write_file):
    reducer = make_reducer({"a.pdf": reduced_size})
    target = write_file(tmp_path / "out" / "a.pdf", 10, b"o")
    outcomes = []

    with pytest.raises(TargetExistsError) as exc_info:
        process_file(source, target, Policy(fail_if_exists=True), reducer, outcomes.append)

    assert exc_info.value.target_path == target
    assert "already exists" in str(exc_info.value)
    assert outcomes == []
    assert target.read_bytes() == b"o" * 10
    assert not reducer.artifacts[0].exists()


def test_fail_if_exists_ignores_empty_target(tmp_path, source, make_reducer, write_file):
    reducer = make_reducer({"a.pdf": 400})
    target = write_file(tmp_path / "out" / "a.pdf", 0)

    sizes = process_file(source, target, Policy(fail_if_exists=True), reducer)

    assert sizes == SizePair(1000, 400)


def test_missing_source_propagates(tmp_path, make_reducer):
    with pytest.raises(FileNotFoundError):
        process_file(tmp_path / "nope.pdf", tmp_path / "out.pdf", Policy(), make_reducer())


def test_install_file_failure_leaves_no_partial_target(tmp_path, monkeypatch, write_file):
    source = write_file(tmp_path / "src.pdf", 100)
    target = write_file(tmp_path / "out" / "dst.pdf", 10, b"o")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("pdfreducer.processor.os.replace", broken_replace)

    with pytest.raises(OSError, match="disk full"):
        install_file(source, target)

    assert target.read_bytes() == b"o" * 10
    assert _staging_files(target) == []


def test_temp_path_is_unique_and_never_an_existing_file(tmp_path, write_file):
    target = tmp_path / "a.pdf"
    neighbour = write_file(tmp_path / "a.pdf.tmp", 10, b"n")

    first = temp_path(target)
    second = temp_path(target)

    assert first != second
    assert neighbour not in (first, second)
    assert first.parent == second.parent == tmp_path


def test_source_named_like_staging_file_survives(tmp_path, make_reducer, write_file):
    source = write_file(tmp_path / "a.pdf.tmp", 1000)
    target = tmp_path / "a.pdf"

    sizes = process_file(source, target, Policy(), make_reducer({"a.pdf.tmp": 400}))

    assert sizes == SizePair(1000, 400)
    assert source.read_bytes() == b"x" * 1000
    assert target.read_bytes() == b"r" * 400
    assert _staging_files(target) == [source]


def test_unrelated_tmp_file_in_output_tree_is_kept(tmp_path, source, make_reducer, write_file):
    target = tmp_path / "out" / "a.pdf"
    neighbour = write_file(tmp_path / "out" / "a.pdf.tmp", 10, b"n")

    process_file(source, target, Policy(), make_reducer({"a.pdf": 400}))

    assert neighbour.read_bytes() == b"n" * 10
    assert target.stat().st_size == 400
