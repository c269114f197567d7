"""
Runtime root and result writers.

This package provides the root of a report, the group and test handles
the reporter drives, and the writers that persist finished results.

Usage:
    from chorus.runtime import Runtime, FileSystemWriter

    runtime = Runtime(FileSystemWriter("chorus-results"))
    group = runtime.start_group("checkout")
    test = group.start_test("pays with card")
    test.end_test()
    group.end_group()
"""

# Base
from .base import BaseWriter

# Implementations
from .writers import FileSystemWriter, InMemoryWriter, read_results

# Runtime
from .runtime import Group, Runtime, TestItem

__all__ = [
    # Base
    "BaseWriter",
    # Implementations
    "FileSystemWriter",
    "InMemoryWriter",
    "read_results",
    # Runtime
    "Group",
    "Runtime",
    "TestItem",
]
