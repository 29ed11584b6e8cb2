from __future__ import annotations

"""
Tree Renderer.

Turns a frame's ancestry bitmap, its depth and an entry description into
one box-drawing line. Pure formatting: nothing here touches traversal
state. Also renders the closing summary block.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from gtree.domain.tree_models import ActivityReport
from gtree.utils.formatting import human_size

TEE = "├── "
ELBOW = "└── "
PIPE = "│   "
BLANK = "    "

FILE_LEAD = ": "
RECURSIVE_MARK = " [recursive]"

COLOUR_START = "\033[36m"
COLOUR_RESET = "\033[0m"

# -----------------------------------------------------------------------------
# ENTRY DESCRIPTION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EntryDescription:
    """
    What to print for a single line.

    Attributes:
        name: Directory base name or file display text.
        is_last: Entry is the final sibling (directories) or its parent
            directory is the final sibling (files).
        is_dir: Directory-style line with a branch connector.
        is_symlink: Render in '@name -> target' form.
        target: Symlink target text.
        is_recursive: Identity already visited.
        file_count: Directory-local file count for the stats suffix.
        file_bytes: Directory-local byte total for the stats suffix.
    """
    name: str
    is_last: bool = False
    is_dir: bool = True
    is_symlink: bool = False
    target: str = ""
    is_recursive: bool = False
    file_count: int = 0
    file_bytes: int = 0

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_prefix(ancestor_siblings: Sequence[bool], depth: int) -> str:
    """
    Build the continuation columns for every ancestor level 1..depth-1.
    """
    parts: List[str] = []
    for level in range(1, depth):
        has_more = level < len(ancestor_siblings) and ancestor_siblings[level]
        parts.append(PIPE if has_more else BLANK)
    return "".join(parts)


def render_entry_line(
        ancestor_siblings: Sequence[bool],
        depth: int,
        entry: EntryDescription,
        show_stats: bool = False,
        colour_files: bool = False,
) -> str:
    """
    Render one tree line.

    Directories get a branch connector below the root; files get an
    indentation block that reflects whether their directory is the last
    sibling.

    Args:
        ancestor_siblings: Per-level flags, True where an ancestor still had
            siblings pending.
        depth: Depth of the frame the line belongs to.
        entry: The entry to print.
        show_stats: Append '[Files: N] [Size: H]' to populated directories.
        colour_files: Wrap file names in ANSI colour codes.

    Returns:
        str: The rendered line, without a trailing newline.
    """
    prefix = render_prefix(ancestor_siblings, depth)

    if not entry.is_dir:
        indent = "" if depth == 0 else (BLANK if entry.is_last else PIPE)
        text = f"{COLOUR_START}{entry.name}{COLOUR_RESET}" if colour_files else entry.name
        return f"{prefix}{indent}{FILE_LEAD}{text}"

    connector = ""
    if depth > 0:
        connector = ELBOW if entry.is_last else TEE

    return f"{prefix}{connector}{_directory_content(entry, show_stats)}"


def render_summary(report: ActivityReport, include_files: bool) -> List[str]:
    """
    Render the closing summary block.

    Args:
        report: Final activity totals.
        include_files: Add file totals (file listing or stats requested).

    Returns:
        List[str]: Summary lines, starting with a blank separator line.
    """
    lines = [
        "",
        f"Total Number of Directories traversed {report.total_directories} "
        f"(containing {report.total_linked_directories} links)",
        f"Maximum depth descended: {report.max_depth}",
    ]
    if report.max_depth_attempted > report.max_depth:
        lines.append(f"Depth limit reached at level: {report.max_depth_attempted}")

    if include_files:
        lines.append(
            f"Total Number of Files: {report.total_files} "
            f"(of which {report.total_linked_files} are linked)"
        )
        lines.append(f"Total File Size: {human_size(report.total_file_bytes)}")
    return lines


def summary_to_dict(report: ActivityReport, include_files: bool) -> Dict[str, Any]:
    """Machine-readable counterpart of render_summary."""
    data: Dict[str, Any] = {
        "directories": report.total_directories,
        "linked_directories": report.total_linked_directories,
        "max_depth": report.max_depth,
        "max_depth_attempted": report.max_depth_attempted,
    }
    if include_files:
        data.update({
            "files": report.total_files,
            "linked_files": report.total_linked_files,
            "total_bytes": report.total_file_bytes,
            "total_size": human_size(report.total_file_bytes),
        })
    return data

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _directory_content(entry: EntryDescription, show_stats: bool) -> str:
    recursive = RECURSIVE_MARK if entry.is_recursive else ""

    if entry.is_symlink:
        return f"@{entry.name} -> {entry.target}{recursive}"

    if show_stats and entry.file_count > 0:
        return (
            f"{entry.name} [Files: {entry.file_count}] "
            f"[Size: {human_size(entry.file_bytes)}]{recursive}"
        )
    return f"{entry.name}{recursive}"
