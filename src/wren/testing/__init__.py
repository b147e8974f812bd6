"""Test utilities for wren applications::

    from wren.testing import RecordingWriter, TestClient
"""

from wren.testing.client import TestClient
from wren.testing.writer import RecordingWriter

__all__ = ["RecordingWriter", "TestClient"]
