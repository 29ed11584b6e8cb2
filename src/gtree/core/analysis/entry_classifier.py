from __future__ import annotations

"""
Directory Entry Classifier.

Decides what a raw directory entry is from its link-status and resolved
metadata, and folds file-like entries into the directory-local and global
totals. Directory-typed entries are turned into ChildEntry records for the
traversal engine to queue.
"""

import os
import stat
from typing import Optional

from gtree.domain.tree_models import (
    ActivityReport,
    ChildEntry,
    EntryKind,
    Frame,
    TreeOptions,
)
from gtree.infra.fs import read_link_target
from gtree.utils.formatting import human_size

HIDDEN_MARKER = "."
_SPECIAL_NAMES = (".", "..")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def is_visible_name(name: str, show_hidden: bool) -> bool:
    """
    Apply the name filters that run before classification.

    '.' and '..' are always rejected; hidden names only when show_hidden
    is off.
    """
    if name in _SPECIAL_NAMES:
        return False
    if not show_hidden and name.startswith(HIDDEN_MARKER):
        return False
    return True


def classify_entry(
        link_st: os.stat_result,
        target_st: Optional[os.stat_result],
) -> EntryKind:
    """
    Classify an entry into exactly one EntryKind.

    Args:
        link_st: lstat result of the entry itself.
        target_st: stat result after following links, None if unresolved.

    Returns:
        EntryKind: The entry classification.
    """
    is_link = stat.S_ISLNK(link_st.st_mode)

    if is_link:
        if target_st is None:
            return EntryKind.DANGLING_LINK
        if stat.S_ISDIR(target_st.st_mode):
            return EntryKind.LINKED_DIRECTORY
        if stat.S_ISREG(target_st.st_mode):
            return EntryKind.LINKED_FILE
        return EntryKind.OTHER

    if target_st is None:
        return EntryKind.OTHER
    if stat.S_ISDIR(target_st.st_mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(target_st.st_mode):
        return EntryKind.FILE
    return EntryKind.OTHER


def fold_file_entry(
        kind: EntryKind,
        path: str,
        name: str,
        target_st: Optional[os.stat_result],
        frame: Frame,
        report: ActivityReport,
        options: TreeOptions,
) -> None:
    """
    Update totals for a file-like entry and queue its display text.

    Dangling links count as files but contribute no size.
    """
    if not kind.is_file_like:
        return

    size = target_st.st_size if (target_st is not None and kind != EntryKind.DANGLING_LINK) else 0

    frame.file_count += 1
    frame.file_byte_total += size
    report.total_files += 1
    report.total_file_bytes += size
    if kind != EntryKind.FILE:
        report.total_linked_files += 1

    if options.show_files:
        target = read_link_target(path) if kind != EntryKind.FILE else ""
        frame.pending_file_display_lines.append(
            format_file_display(kind, name, size, target, show_size=options.show_file_stats)
        )


def build_child_entry(kind: EntryKind, path: str) -> ChildEntry:
    """Create the queued reference for a directory-typed entry."""
    if kind == EntryKind.LINKED_DIRECTORY:
        return ChildEntry(path=path, is_symlink=True, symlink_target=read_link_target(path))
    return ChildEntry(path=path)


def format_file_display(
        kind: EntryKind,
        name: str,
        size: int,
        target: str = "",
        show_size: bool = False,
) -> str:
    """
    Build the display text of a file line (without the ': ' lead).

    Examples:
        notes.txt
        notes.txt (1.5K)
        @current (-> notes.txt)
        @gone -> missing.txt [dangling]
    """
    if kind == EntryKind.LINKED_FILE:
        return f"@{name} (-> {target})"
    if kind == EntryKind.DANGLING_LINK:
        return f"@{name} -> {target} [dangling]"
    if show_size:
        return f"{name} ({human_size(size)})"
    return name
