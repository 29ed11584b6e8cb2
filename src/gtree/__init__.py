from __future__ import annotations

"""
gtree: cycle-safe directory tree renderer.
"""

__version__ = "2.2.0"
