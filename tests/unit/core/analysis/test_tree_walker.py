from __future__ import annotations

"""
Unit tests for the Directory Tree Walker.

Verifies:
1. Line emission order (directory line, its files, then its children).
2. Symlink loop detection by physical identity, including loops to root.
3. The depth bound and max-depth bookkeeping.
4. Totals aggregation, hidden entry filtering and recoverable errors.
5. Release of every directory handle on all exit paths.
"""

import os
from pathlib import Path
from typing import Dict, List

import pytest

from gtree.core.analysis import tree_walker
from gtree.core.analysis.tree_walker import generate_directory_tree, walk_directory_tree
from gtree.domain.tree_models import RootDirectoryError, TreeOptions

symlinks_only = pytest.mark.skipif(
    not hasattr(os, "symlink") or os.name == "nt",
    reason="Symbolic links are not available on this platform.",
)


def _dir_order(path: Path) -> List[str]:
    """Subdirectory names in filesystem enumeration order."""
    return [e.name for e in os.scandir(path) if e.is_dir()]

# -----------------------------------------------------------------------------
# REFERENCE SCENARIOS
# -----------------------------------------------------------------------------

def test_loop_back_to_root_is_marked_and_not_followed(loop_tree: Path) -> None:
    root = str(loop_tree)
    result = generate_directory_tree(root, TreeOptions(follow_links=True, show_files=True))

    assert result.lines == [
        root,
        ": f.txt",
        "└── A",
        f"    └── @loop -> {root} [recursive]",
    ]
    report = result.report
    assert report.total_directories == 2
    assert report.total_linked_directories == 1
    assert report.total_files == 1
    assert report.total_file_bytes == 10
    assert report.max_depth == 1


def test_hidden_entries_are_suppressed_by_default(tmp_path: Path) -> None:
    (tmp_path / ".secret").write_text("x", encoding="utf-8")
    (tmp_path / "visible.txt").write_text("y", encoding="utf-8")

    hidden_off = generate_directory_tree(str(tmp_path), TreeOptions(show_files=True))
    hidden_on = generate_directory_tree(str(tmp_path), TreeOptions(show_files=True, show_hidden=True))

    assert ": visible.txt" in hidden_off.lines
    assert ": .secret" not in hidden_off.lines
    assert hidden_off.report.total_files == 1

    assert ": .secret" in hidden_on.lines
    assert hidden_on.report.total_files == 2


def test_hidden_directories_are_not_descended(tmp_path: Path) -> None:
    (tmp_path / ".git" / "objects").mkdir(parents=True)

    result = generate_directory_tree(str(tmp_path))

    assert result.lines == [str(tmp_path)]
    assert result.report.total_directories == 1

# -----------------------------------------------------------------------------
# ORDERING AND RENDERING
# -----------------------------------------------------------------------------

def test_children_follow_enumeration_order(tmp_path: Path) -> None:
    for name in ("alpha", "beta", "gamma", "delta"):
        (tmp_path / name).mkdir()
    expected = _dir_order(tmp_path)

    lines = generate_directory_tree(str(tmp_path)).lines[1:]

    assert [line[4:] for line in lines] == expected
    assert [line[:4] for line in lines] == ["├── "] * (len(expected) - 1) + ["└── "]


def test_files_render_before_child_directories(nested_tree: Path) -> None:
    lines = generate_directory_tree(str(nested_tree), TreeOptions(show_files=True)).lines

    assert lines[0] == str(nested_tree)
    assert lines[1] == ": top.txt"
    assert lines[2] == "└── a"
    assert lines[3] == "    : a1.txt"


def test_ancestry_prefix_for_nested_children(nested_tree: Path) -> None:
    lines = generate_directory_tree(str(nested_tree)).lines
    b_is_last = _dir_order(nested_tree / "a")[-1] == "b"

    expected_d = "        └── d" if b_is_last else "    │   └── d"
    assert expected_d in lines
    assert lines.index(expected_d) == lines.index("    └── b" if b_is_last else "    ├── b") + 1


def test_stats_suffix_on_populated_directories(loop_tree: Path) -> None:
    result = generate_directory_tree(str(loop_tree), TreeOptions(show_file_stats=True))

    assert result.lines[0] == f"{loop_tree} [Files: 1] [Size: 10B]"
    assert "└── A" in result.lines

# -----------------------------------------------------------------------------
# SYMLINKS AND CYCLES
# -----------------------------------------------------------------------------

@symlinks_only
def test_loop_is_marked_even_without_following(loop_tree: Path) -> None:
    result = generate_directory_tree(str(loop_tree), TreeOptions(follow_links=False))

    assert result.lines[-1].endswith("[recursive]")
    assert result.report.total_linked_directories == 1


@symlinks_only
def test_link_to_sibling_is_entered_once(tmp_path: Path) -> None:
    (tmp_path / "target" / "inner").mkdir(parents=True)
    os.symlink("target", str(tmp_path / "via"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(follow_links=True))

    recursive = [line for line in result.lines if line.endswith("[recursive]")]
    assert len(recursive) == 1
    assert result.report.total_directories == 3
    assert result.report.total_linked_directories == 1
    assert sum(1 for line in result.lines if line.endswith("inner")) == 1


@symlinks_only
def test_unfollowed_link_is_rendered_but_not_entered(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    (outside / "hidden_gem").mkdir(parents=True)
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(str(outside), str(root / "ext"))

    result = generate_directory_tree(str(root), TreeOptions(follow_links=False))

    assert result.lines == [str(root), f"└── @ext -> {outside}"]
    assert result.report.total_directories == 1
    assert result.report.total_linked_directories == 1


@symlinks_only
def test_followed_link_is_entered(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    (outside / "hidden_gem").mkdir(parents=True)
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(str(outside), str(root / "ext"))

    result = generate_directory_tree(str(root), TreeOptions(follow_links=True))

    assert f"└── @ext -> {outside}" in result.lines
    assert "    └── hidden_gem" in result.lines
    assert result.report.total_directories == 3
    assert result.report.max_depth == 2


@symlinks_only
def test_self_referencing_link_terminates(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    os.symlink(".", str(tmp_path / "sub" / "self"))
    os.symlink("..", str(tmp_path / "sub" / "parent"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(follow_links=True))

    recursive = [line for line in result.lines if "[recursive]" in line]
    assert len(recursive) == 2
    assert result.report.total_directories == 2


@symlinks_only
def test_dangling_link_counts_as_linked_file(tmp_path: Path) -> None:
    os.symlink("does-not-exist", str(tmp_path / "broken"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(show_files=True))

    assert ": @broken -> does-not-exist [dangling]" in result.lines
    assert result.report.total_files == 1
    assert result.report.total_linked_files == 1
    assert result.report.total_file_bytes == 0


@symlinks_only
def test_linked_file_counts_size_of_target(tmp_path: Path) -> None:
    (tmp_path / "real.txt").write_bytes(b"12345")
    os.symlink("real.txt", str(tmp_path / "alias"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(show_files=True))

    assert ": @alias (-> real.txt)" in result.lines
    assert result.report.total_files == 2
    assert result.report.total_linked_files == 1
    assert result.report.total_file_bytes == 10

# -----------------------------------------------------------------------------
# DEPTH BOUND
# -----------------------------------------------------------------------------

def test_depth_bound_stops_frames(tmp_path: Path) -> None:
    (tmp_path / "d1" / "d2" / "d3" / "d4").mkdir(parents=True)

    result = generate_directory_tree(str(tmp_path), TreeOptions(max_depth=3))

    assert result.lines == [
        str(tmp_path),
        "└── d1",
        "    └── d2",
        "        └── d3",
    ]
    assert max(d.depth for d in result.directories) == 2
    assert result.report.max_depth == 2
    assert result.report.max_depth_attempted == 3
    # d3 is rendered and counted but never entered
    assert result.report.total_directories == 4
    assert all(not line.endswith("d4") for line in result.lines)


def test_depth_bound_on_long_chain(tmp_path: Path) -> None:
    depth = 60
    current = tmp_path
    for _ in range(depth):
        current = current / "d"
        current.mkdir()

    result = generate_directory_tree(str(tmp_path), TreeOptions(max_depth=50))

    assert result.report.max_depth == 49
    assert result.report.max_depth_attempted == 50
    assert result.report.total_directories == 51
    assert len(result.lines) == 51


@symlinks_only
def test_depth_bound_stops_followed_link(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    (outside / "gem").mkdir(parents=True)
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    os.symlink(str(outside), str(root / "sub" / "ext"))

    result = generate_directory_tree(str(root), TreeOptions(follow_links=True, max_depth=2))

    assert result.lines == [
        str(root),
        "└── sub",
        f"    └── @ext -> {outside}",
    ]
    report = result.report
    assert report.total_linked_directories == 1
    assert report.total_directories == 2
    assert report.max_depth == 1
    assert report.max_depth_attempted == 2

# -----------------------------------------------------------------------------
# CONTROLLED ENUMERATION ORDER
# -----------------------------------------------------------------------------

class _SortedHandle:
    """Directory handle that yields entries sorted by name."""

    def __init__(self, inner, reverse: bool):
        self._inner = inner
        self._reverse = reverse

    def __iter__(self):
        return iter(sorted(self._inner, key=lambda e: e.name, reverse=self._reverse))

    def close(self) -> None:
        self._inner.close()


@pytest.fixture
def sorted_listing(monkeypatch) -> Dict[str, bool]:
    """Force name order on every directory; set ['reverse'] to flip it."""
    order = {"reverse": False}
    real_open = tree_walker.open_directory

    def sorted_open(path):
        handle, error = real_open(path)
        if handle is None:
            return handle, error
        return _SortedHandle(handle, order["reverse"]), None

    monkeypatch.setattr(tree_walker, "open_directory", sorted_open)
    return order


@symlinks_only
def test_real_directory_after_followed_link_is_recursive(tmp_path: Path, sorted_listing) -> None:
    (tmp_path / "target" / "inner").mkdir(parents=True)
    os.symlink("target", str(tmp_path / "alias"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(follow_links=True))

    assert result.lines == [
        str(tmp_path),
        "├── @alias -> target",
        "├── alias",
        "│   └── inner",
        "└── target [recursive]",
    ]
    assert result.report.total_directories == 3
    assert result.report.total_linked_directories == 1
    assert str(tmp_path / "target") not in [d.path for d in result.directories]


@symlinks_only
def test_link_after_real_directory_is_recursive(tmp_path: Path, sorted_listing) -> None:
    sorted_listing["reverse"] = True
    (tmp_path / "target" / "inner").mkdir(parents=True)
    os.symlink("target", str(tmp_path / "alias"))

    result = generate_directory_tree(str(tmp_path), TreeOptions(follow_links=True))

    assert result.lines == [
        str(tmp_path),
        "├── target",
        "│   └── inner",
        "└── @alias -> target [recursive]",
    ]
    assert result.report.total_directories == 3
    assert result.report.total_linked_directories == 1

# -----------------------------------------------------------------------------
# AGGREGATION
# -----------------------------------------------------------------------------

def test_local_totals_sum_to_global_totals(nested_tree: Path) -> None:
    result = generate_directory_tree(str(nested_tree), TreeOptions(show_file_stats=True))

    assert sum(d.file_count for d in result.directories) == result.report.total_files == 3
    assert sum(d.file_bytes for d in result.directories) == result.report.total_file_bytes == 15
    assert len(result.directories) == result.report.total_directories == 5


def test_every_directory_entered_once(nested_tree: Path) -> None:
    result = generate_directory_tree(str(nested_tree))
    paths = [d.path for d in result.directories]

    assert len(paths) == len(set(paths))
    assert result.report.total_directories == len(paths)

# -----------------------------------------------------------------------------
# ERRORS AND RESOURCES
# -----------------------------------------------------------------------------

def test_missing_root_is_fatal_before_output(tmp_path: Path) -> None:
    emitted: List[str] = []

    with pytest.raises(RootDirectoryError) as exc_info:
        walk_directory_tree(str(tmp_path / "missing"), emit=emitted.append)

    assert emitted == []
    assert exc_info.value.path.endswith("missing")


def test_file_as_root_is_fatal(tmp_path: Path) -> None:
    target = tmp_path / "plain.txt"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(RootDirectoryError):
        walk_directory_tree(str(target), emit=lambda line: None)


class _TrackedHandle:
    """Directory handle wrapper that counts close() calls."""

    def __init__(self, inner):
        self._inner = inner
        self.closed = 0

    def __iter__(self):
        return iter(self._inner)

    def close(self) -> None:
        self.closed += 1
        self._inner.close()


@pytest.fixture
def tracked_handles(monkeypatch) -> List[_TrackedHandle]:
    handles: List[_TrackedHandle] = []
    real_open = tree_walker.open_directory

    def tracking_open(path):
        handle, error = real_open(path)
        if handle is None:
            return handle, error
        wrapped = _TrackedHandle(handle)
        handles.append(wrapped)
        return wrapped, None

    monkeypatch.setattr(tree_walker, "open_directory", tracking_open)
    return handles


def test_handles_released_exactly_once(nested_tree: Path, tracked_handles) -> None:
    generate_directory_tree(str(nested_tree))

    assert len(tracked_handles) == 5
    assert all(h.closed == 1 for h in tracked_handles)


def test_handles_released_on_early_termination(nested_tree: Path, tracked_handles) -> None:
    emitted: List[str] = []

    def failing_emit(line: str) -> None:
        emitted.append(line)
        if len(emitted) == 3:
            raise RuntimeError("sink closed")

    with pytest.raises(RuntimeError):
        walk_directory_tree(str(nested_tree), emit=failing_emit)

    assert tracked_handles
    assert all(h.closed == 1 for h in tracked_handles)


def test_unopenable_subdirectory_is_skipped(nested_tree: Path, monkeypatch, caplog) -> None:
    real_open = tree_walker.open_directory
    blocked = str(nested_tree / "a" / "b")

    def guarded_open(path):
        if path == blocked:
            return None, "Permission denied"
        return real_open(path)

    monkeypatch.setattr(tree_walker, "open_directory", guarded_open)

    with caplog.at_level("WARNING"):
        result = generate_directory_tree(str(nested_tree))

    assert any(line.endswith("── b") for line in result.lines)
    assert all(not line.endswith("── d") for line in result.lines)
    assert result.report.total_directories == 3
    assert "Cannot open directory" in caplog.text


def test_saved_tree_keeps_undecodable_names(undecodable_tree: Path, tmp_path: Path) -> None:
    save_path = tmp_path / "saved" / "tree.txt"

    result = generate_directory_tree(str(undecodable_tree), save_path=str(save_path))

    saved = save_path.read_bytes()
    assert b"\xe2\x94\x94\xe2\x94\x80\xe2\x94\x80 bad\xff\n" in saved
    assert saved == ("\n".join(result.lines) + "\n").encode("utf-8", "surrogateescape")
