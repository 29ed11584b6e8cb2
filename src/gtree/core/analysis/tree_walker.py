from __future__ import annotations

"""
Directory Tree Walker.

Explicit-stack depth-first traversal. Each directory on the active path is
a Frame that moves through three states: SCANNING reads all entries once,
queues directory children and renders the directory plus its files;
DRAINING hands out one queued child per loop iteration and decides whether
to descend; EXHAUSTED releases the handle and pops the frame.

Symlink loops are broken by physical identity (device, inode), and the
configured depth bound caps the stack regardless of link layout.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from gtree.core.analysis.entry_classifier import (
    build_child_entry,
    classify_entry,
    fold_file_entry,
    is_visible_name,
)
from gtree.core.analysis.identity_set import IdentitySet
from gtree.core.analysis.tree_renderer import EntryDescription, render_entry_line
from gtree.domain.tree_models import (
    ActivityReport,
    ChildEntry,
    DirectorySummary,
    Frame,
    FrameState,
    Identity,
    RootDirectoryError,
    TreeOptions,
    TreeResult,
)
from gtree.infra.fs import (
    directory_identity,
    entry_basename,
    join_entry_path,
    link_status,
    open_directory,
    open_output_file,
    resolved_status,
)

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


@dataclass
class TraversalContext:
    """
    State shared by every frame of one walk.

    Created by walk_directory_tree and discarded with it; nothing here is
    process-global.
    """
    options: TreeOptions
    emit: Emit
    visited: IdentitySet = field(default_factory=IdentitySet)
    report: ActivityReport = field(default_factory=ActivityReport)
    directories: List[DirectorySummary] = field(default_factory=list)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def generate_directory_tree(
        input_path: str,
        options: Optional[TreeOptions] = None,
        print_to_log: bool = False,
        save_path: str = "",
) -> TreeResult:
    """
    Walk a directory and collect the rendered tree in memory.

    Args:
        input_path: Traversal root.
        options: Traversal switches. Defaults to TreeOptions().
        print_to_log: Whether to log the output to INFO.
        save_path: Optional file path to persist the tree.

    Returns:
        TreeResult: Rendered lines, global report and per-directory totals.

    Raises:
        RootDirectoryError: If the root cannot be opened.
    """
    logger.info(f"Generating directory tree for: {input_path}")

    lines: List[str] = []
    ctx = walk_directory_tree(input_path, options, emit=lines.append)

    if print_to_log:
        logger.info("Tree Preview:\n" + "\n".join(lines))

    if save_path:
        save_tree_lines(save_path, lines)

    return TreeResult(lines=lines, report=ctx.report, directories=ctx.directories)


def walk_directory_tree(
        root_path: str,
        options: Optional[TreeOptions] = None,
        emit: Optional[Emit] = None,
) -> TraversalContext:
    """
    Run the explicit-stack traversal, streaming each line to emit.

    Args:
        root_path: Traversal root, rendered verbatim on the first line.
        options: Traversal switches. Defaults to TreeOptions().
        emit: Line sink. Defaults to print.

    Returns:
        TraversalContext: Final report, visited identities and per-directory
        totals.

    Raises:
        RootDirectoryError: If the root cannot be opened. Nothing has been
        emitted at that point.
    """
    ctx = TraversalContext(options=options or TreeOptions(), emit=emit or print)
    stack: List[Frame] = [_open_root_frame(root_path, ctx)]

    try:
        while stack:
            frame = stack[-1]

            if frame.state == FrameState.SCANNING:
                _scan_frame(frame, ctx)

            if frame.pending_children:
                child_frame = _drain_next_child(frame, ctx)
                if child_frame is not None:
                    stack.append(child_frame)
            else:
                _pop_frame(stack, ctx)
    finally:
        # Early termination leaves frames open; close them top-down.
        while stack:
            stack.pop().release()

    logger.debug(
        f"Traversal finished: {ctx.report.total_directories} directories, "
        f"{ctx.report.total_files} files, max depth {ctx.report.max_depth}"
    )
    return ctx


def save_tree_lines(save_path: str, lines: List[str]) -> None:
    """Safely persist tree lines to the filesystem."""
    try:
        with open_output_file(save_path) as f:
            f.write("\n".join(lines) + "\n")
        logger.info(f"Tree saved to file: {save_path}")
    except OSError as e:
        logger.error(f"Failed to save tree to '{save_path}': {e}")

# -----------------------------------------------------------------------------
# INTERNAL HELPERS (FRAME LIFECYCLE)
# -----------------------------------------------------------------------------

def _open_root_frame(root_path: str, ctx: TraversalContext) -> Frame:
    """Open and register the root; any failure here is fatal."""
    handle, error = open_directory(root_path)
    if handle is None:
        raise RootDirectoryError(root_path, error or "")

    identity = directory_identity(root_path)
    if identity is None:
        handle.close()
        raise RootDirectoryError(root_path, "cannot resolve directory identity")

    # Registered up front so a link back to the root is caught like any loop.
    if ctx.visited.register(identity):
        ctx.report.total_directories += 1
    ctx.report.track_depth(0)

    bitmap = [False] * (max(ctx.options.max_depth, 1) + 2)
    return Frame(path=root_path, depth=0, ancestor_siblings=bitmap, handle=handle)


def _enter_directory(
        path: str,
        depth: int,
        parent: Frame,
        is_last: bool,
        identity: Identity,
        ctx: TraversalContext,
        announce_failure: bool,
) -> Optional[Frame]:
    """
    Open a child directory and build its frame.

    An unopenable directory yields no frame and is treated as empty.
    """
    handle, error = open_directory(path)
    if handle is None:
        logger.warning(f"Cannot open directory '{path}': {error}")
        if announce_failure:
            _emit_child_line(parent, EntryDescription(name=entry_basename(path), is_last=is_last), ctx)
        return None

    if ctx.visited.register(identity):
        ctx.report.total_directories += 1
    ctx.report.track_depth(depth)

    return Frame(
        path=path,
        depth=depth,
        ancestor_siblings=list(parent.ancestor_siblings),
        is_last=is_last,
        handle=handle,
    )


def _pop_frame(stack: List[Frame], ctx: TraversalContext) -> None:
    frame = stack.pop()
    ctx.directories.append(
        DirectorySummary(
            path=frame.path,
            depth=frame.depth,
            file_count=frame.file_count,
            file_bytes=frame.file_byte_total,
        )
    )
    frame.release()

# -----------------------------------------------------------------------------
# INTERNAL HELPERS (SCAN PHASE)
# -----------------------------------------------------------------------------

def _scan_frame(frame: Frame, ctx: TraversalContext) -> None:
    """
    Read every entry once, queue directory children, count files, then
    render the directory line followed by its file lines.
    """
    opts = ctx.options

    try:
        for entry in frame.entries():
            name = entry.name
            if not is_visible_name(name, opts.show_hidden):
                continue

            path = join_entry_path(frame.path, name)
            link_st = link_status(path)
            if link_st is None:
                logger.debug(f"Skipping unreadable entry: {path}")
                continue

            target_st = resolved_status(path) if stat.S_ISLNK(link_st.st_mode) else link_st
            kind = classify_entry(link_st, target_st)

            if kind.is_directory:
                frame.pending_children.append(build_child_entry(kind, path))
            else:
                fold_file_entry(kind, path, name, target_st, frame, ctx.report, opts)
    except OSError as e:
        logger.warning(f"Error while reading directory '{frame.path}': {e}")

    frame.state = FrameState.DRAINING

    name = frame.path if frame.depth == 0 else entry_basename(frame.path)
    ctx.emit(render_entry_line(
        frame.ancestor_siblings,
        frame.depth,
        EntryDescription(
            name=name,
            is_last=frame.is_last,
            file_count=frame.file_count,
            file_bytes=frame.file_byte_total,
        ),
        show_stats=opts.show_file_stats,
    ))

    for text in frame.pending_file_display_lines:
        ctx.emit(render_entry_line(
            frame.ancestor_siblings,
            frame.depth,
            EntryDescription(name=text, is_last=frame.is_last, is_dir=False),
            colour_files=opts.colour_files,
        ))
    frame.pending_file_display_lines.clear()

# -----------------------------------------------------------------------------
# INTERNAL HELPERS (DRAIN PHASE)
# -----------------------------------------------------------------------------

def _drain_next_child(frame: Frame, ctx: TraversalContext) -> Optional[Frame]:
    """
    Consume the next queued child and decide whether to descend.

    Returns:
        Optional[Frame]: The frame to push, or None if the child is not
        entered.
    """
    child = frame.pending_children.popleft()
    is_last_child = not frame.pending_children
    next_depth = frame.depth + 1

    frame.ancestor_siblings[next_depth] = not is_last_child

    target_st = resolved_status(child.path)

    if child.is_symlink:
        return _drain_linked_directory(frame, child, target_st, is_last_child, ctx)
    return _drain_plain_directory(frame, child, target_st, is_last_child, ctx)


def _drain_linked_directory(
        frame: Frame,
        child: ChildEntry,
        target_st: Optional[os.stat_result],
        is_last_child: bool,
        ctx: TraversalContext,
) -> Optional[Frame]:
    next_depth = frame.depth + 1
    identity = Identity.from_stat(target_st) if target_st is not None else None
    already_visited = identity is not None and ctx.visited.contains(identity)

    _emit_child_line(frame, EntryDescription(
        name=entry_basename(child.path),
        is_last=is_last_child,
        is_symlink=True,
        target=child.symlink_target,
        is_recursive=already_visited,
    ), ctx)

    if identity is None:
        logger.debug(f"Symlinked directory no longer resolves: {child.path}")
        return None

    ctx.report.total_linked_directories += 1

    if already_visited or not ctx.options.follow_links:
        return None

    if next_depth >= ctx.options.max_depth:
        ctx.report.track_attempted_depth(next_depth)
        return None

    return _enter_directory(child.path, next_depth, frame, is_last_child, identity, ctx,
                            announce_failure=False)


def _drain_plain_directory(
        frame: Frame,
        child: ChildEntry,
        target_st: Optional[os.stat_result],
        is_last_child: bool,
        ctx: TraversalContext,
) -> Optional[Frame]:
    if target_st is None or not stat.S_ISDIR(target_st.st_mode):
        logger.debug(f"Directory vanished during traversal: {child.path}")
        return None

    next_depth = frame.depth + 1
    identity = Identity.from_stat(target_st)
    already_visited = ctx.visited.contains(identity)
    depth_limit_hit = next_depth >= ctx.options.max_depth

    if not already_visited and not depth_limit_hit:
        return _enter_directory(child.path, next_depth, frame, is_last_child, identity, ctx,
                                announce_failure=True)

    _emit_child_line(frame, EntryDescription(
        name=entry_basename(child.path),
        is_last=is_last_child,
        is_recursive=already_visited,
    ), ctx)

    if ctx.visited.register(identity):
        ctx.report.total_directories += 1
    if depth_limit_hit and not already_visited:
        ctx.report.track_attempted_depth(next_depth)
    return None


def _emit_child_line(frame: Frame, entry: EntryDescription, ctx: TraversalContext) -> None:
    """Render a line one level below frame, using frame's ancestry."""
    ctx.emit(render_entry_line(
        frame.ancestor_siblings,
        frame.depth + 1,
        entry,
        show_stats=ctx.options.show_file_stats,
    ))
