from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for directory trees and configuration dictionaries.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'gtree.domain.config'.
    """
    return {
        "input_path": "/tmp/test_input",
        "output_file": "",
        "max_depth": 1024,
        "follow_links": False,
        "show_hidden": False,
        "show_files": False,
        "show_file_stats": False,
        "colour_files": False,
        "json_summary": False,
    }


@pytest.fixture
def loop_tree(tmp_path: Path) -> Path:
    """
    Creates a tree whose only subdirectory links back to the root.

    Structure:
    /R
      f.txt        (10 bytes)
      /A
        loop -> /R
    """
    if not hasattr(os, "symlink") or os.name == "nt":
        pytest.skip("Symbolic links are not available on this platform.")

    root = tmp_path / "R"
    root.mkdir()
    (root / "f.txt").write_bytes(b"0123456789")
    a = root / "A"
    a.mkdir()
    os.symlink(str(root), str(a / "loop"))
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """
    Creates a symlink-free tree.

    Structure:
    /root
      top.txt      (3 bytes)
      /a
        a1.txt     (5 bytes)
        /b
          /d
            deep.txt (7 bytes)
        /c
    """
    root = tmp_path / "root"
    (root / "a" / "b" / "d").mkdir(parents=True)
    (root / "a" / "c").mkdir()
    (root / "top.txt").write_bytes(b"abc")
    (root / "a" / "a1.txt").write_bytes(b"12345")
    (root / "a" / "b" / "d" / "deep.txt").write_bytes(b"1234567")
    return root


@pytest.fixture
def undecodable_tree(tmp_path: Path) -> Path:
    """
    Creates a tree holding a directory whose name is not valid UTF-8.

    Structure:
    /undecodable
      /bad\\xff
    """
    if os.name == "nt":
        pytest.skip("Byte file names are a POSIX feature.")

    root = tmp_path / "undecodable"
    root.mkdir()
    try:
        os.mkdir(os.path.join(os.fsencode(str(root)), b"bad\xff"))
    except OSError:
        pytest.skip("Filesystem rejects names that are not valid UTF-8.")
    return root
