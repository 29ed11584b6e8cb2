from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Thin wrappers over the 'os' module used by the traversal engine: directory
handles, link-status and resolved metadata, symlink target text and
physical identity lookup. Failures are reported through return values so
the engine can degrade individual entries instead of aborting the walk.
"""

import os
import stat
from typing import Iterator, Optional, TextIO, Tuple

from gtree.domain.tree_models import Identity

# -----------------------------------------------------------------------------
# DIRECTORY HANDLES
# -----------------------------------------------------------------------------

def open_directory(path: str) -> Tuple[Optional[Iterator[os.DirEntry]], Optional[str]]:
    """
    Open a directory for entry enumeration.

    The returned handle is an os.scandir iterator; its owner must call
    close() on it exactly once.

    Args:
        path: Directory to open.

    Returns:
        Tuple[Optional[Iterator[os.DirEntry]], Optional[str]]:
            (Handle, None) on success or (None, error message) on failure.
    """
    try:
        return os.scandir(path), None
    except OSError as e:
        return None, e.strerror or str(e)


def join_entry_path(parent: str, name: str) -> str:
    """Build the child path the same way for every entry."""
    if parent.endswith(os.sep):
        return parent + name
    return parent + os.sep + name

# -----------------------------------------------------------------------------
# METADATA API
# -----------------------------------------------------------------------------

def link_status(path: str) -> Optional[os.stat_result]:
    """Return lstat metadata for path, or None if it cannot be read."""
    try:
        return os.lstat(path)
    except OSError:
        return None


def resolved_status(path: str) -> Optional[os.stat_result]:
    """Return stat metadata after following links, or None if unresolved."""
    try:
        return os.stat(path)
    except OSError:
        return None


def read_link_target(path: str) -> str:
    """Return the raw text of a symbolic link, or an empty string."""
    try:
        return os.readlink(path)
    except (OSError, ValueError):
        return ""


def directory_identity(path: str) -> Optional[Identity]:
    """
    Resolve the physical identity of a directory, following symlinks.

    Returns:
        Optional[Identity]: None if the path cannot be resolved or is not
        a directory.
    """
    st = resolved_status(path)
    if st is None or not stat.S_ISDIR(st.st_mode):
        return None
    return Identity.from_stat(st)


def entry_basename(path: str) -> str:
    """Last path component, tolerating trailing separators."""
    stripped = path.rstrip(os.sep)
    if not stripped:
        return path
    return os.path.basename(stripped)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Expand '~' and environment variables in a user supplied path.

    The path is kept relative when given relative, since the root line
    renders it verbatim.

    Args:
        path: Raw input path string.
        fallback: Path to use if the input is empty.

    Returns:
        str: Expanded path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.expandvars(os.path.expanduser(p))


def ensure_parent_dir(path: str) -> None:
    """Create the parent directory hierarchy of a target file."""
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)


def open_output_file(path: str) -> TextIO:
    """
    Open a text file for the rendered tree, creating parent directories.

    Undecodable file names arrive from os.scandir as surrogate escapes;
    'surrogateescape' writes them back as their original bytes.
    """
    ensure_parent_dir(path)
    return open(path, "w", encoding="utf-8", errors="surrogateescape")
