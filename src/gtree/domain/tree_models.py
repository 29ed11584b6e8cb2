from __future__ import annotations

"""
Directory Tree Traversal Data Models.

Provides the records shared by the traversal engine, the entry classifier
and the renderer: one Frame per open directory on the active descent path,
the queued ChildEntry references awaiting a descent decision, physical
directory identities and the run-wide ActivityReport accumulator.
"""

import os
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Iterator, List, NamedTuple, Optional

# -----------------------------------------------------------------------------
# EXCEPTIONS
# -----------------------------------------------------------------------------

class RootDirectoryError(Exception):
    """
    Raised when the traversal root cannot be opened.

    Attributes:
        path: The starting path requested by the caller.
        reason: Underlying OS error message.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open starting directory '{path}': {reason}" if reason
                         else f"Cannot open starting directory '{path}'")

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class EntryKind(Enum):
    """Classification of a raw directory entry."""
    FILE = "file"
    LINKED_FILE = "linked_file"
    DANGLING_LINK = "dangling_link"
    DIRECTORY = "directory"
    LINKED_DIRECTORY = "linked_directory"
    OTHER = "other"

    @property
    def is_directory(self) -> bool:
        return self in (EntryKind.DIRECTORY, EntryKind.LINKED_DIRECTORY)

    @property
    def is_file_like(self) -> bool:
        return self in (EntryKind.FILE, EntryKind.LINKED_FILE, EntryKind.DANGLING_LINK)


class FrameState(Enum):
    """Lifecycle of a Frame on the traversal stack."""
    SCANNING = "scanning"
    DRAINING = "draining"
    EXHAUSTED = "exhausted"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

class Identity(NamedTuple):
    """Physical directory identity: (device id, file serial number)."""
    device_id: int
    file_serial: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "Identity":
        return cls(st.st_dev, st.st_ino)


@dataclass(frozen=True)
class TreeOptions:
    """
    Immutable traversal switches resolved from the configuration layer.

    Attributes:
        max_depth: Frames are only created at depths strictly below this value.
        follow_links: Descend into symlinked directories.
        show_hidden: Include entries whose name starts with '.'.
        show_files: Emit one line per counted file.
        show_file_stats: Append per-directory file count and size.
        colour_files: Wrap file display text in ANSI colour codes.
    """
    max_depth: int = 1024
    follow_links: bool = False
    show_hidden: bool = False
    show_files: bool = False
    show_file_stats: bool = False
    colour_files: bool = False


@dataclass(frozen=True)
class ChildEntry:
    """
    A directory-typed entry discovered while scanning its parent.

    Attributes:
        path: Filesystem path of the entry.
        is_symlink: True if the entry itself is a symbolic link.
        symlink_target: Raw link text when is_symlink, else empty.
    """
    path: str
    is_symlink: bool = False
    symlink_target: str = ""


@dataclass
class Frame:
    """
    One directory currently open along the active descent path.

    The frame owns its directory handle, its child queue and its file
    display queue until it is popped.
    """
    path: str
    depth: int
    ancestor_siblings: List[bool]
    is_last: bool = False
    handle: Optional[Any] = None
    state: FrameState = FrameState.SCANNING
    pending_children: Deque[ChildEntry] = field(default_factory=deque)
    pending_file_display_lines: List[str] = field(default_factory=list)
    file_count: int = 0
    file_byte_total: int = 0

    def entries(self) -> Iterator[os.DirEntry]:
        """Iterate the raw entries of the owned directory handle."""
        if self.handle is None:
            return iter(())
        return iter(self.handle)

    def release(self) -> None:
        """Close the directory handle and drop the queues. Safe to call twice."""
        if self.handle is not None:
            self.handle.close()
            self.handle = None
        self.pending_children.clear()
        self.pending_file_display_lines.clear()
        self.state = FrameState.EXHAUSTED


@dataclass
class ActivityReport:
    """
    Run-wide accumulator, only ever incremented.

    Attributes:
        total_directories: Distinct directories entered, root included.
        total_linked_directories: Symlinked directories whose target resolved.
        total_files: Files counted (regular, linked and dangling).
        total_linked_files: Counted files that are themselves symlinks.
        total_file_bytes: Sum of sizes of counted files.
        max_depth: Deepest frame actually descended into.
        max_depth_attempted: Deepest level a descent was requested for,
            including descents refused only by the depth bound.
    """
    total_directories: int = 0
    total_linked_directories: int = 0
    total_files: int = 0
    total_linked_files: int = 0
    total_file_bytes: int = 0
    max_depth: int = 0
    max_depth_attempted: int = 0

    def track_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            self.max_depth = depth
        self.track_attempted_depth(depth)

    def track_attempted_depth(self, depth: int) -> None:
        if depth > self.max_depth_attempted:
            self.max_depth_attempted = depth


@dataclass(frozen=True)
class DirectorySummary:
    """Directory-local totals captured when a frame is popped."""
    path: str
    depth: int
    file_count: int
    file_bytes: int


@dataclass
class TreeResult:
    """
    Output of a complete traversal.

    Attributes:
        lines: Rendered tree lines in emission order.
        report: Global activity totals.
        directories: Per-directory totals in pop order.
    """
    lines: List[str] = field(default_factory=list)
    report: ActivityReport = field(default_factory=ActivityReport)
    directories: List[DirectorySummary] = field(default_factory=list)
