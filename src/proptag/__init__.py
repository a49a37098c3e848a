"""
proptag — documentation property linter

File: src/proptag/__init__.py

Purpose
- Package root. Checks that source files carry structured documentation
  properties (``[[OPEN:name]] ... [[CLOSE:name]]`` tags) in their file-level
  and function-level comment blocks, against a layered property schema.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
