"""Patch engine.

Exports
-------
apply_patch
    Apply ordered block ops; unknown ids are skipped silently.
apply_patch_with_report
    Same transition, plus a per-op ``applied`` / ``not_found`` outcome.
create_document
    Build a fresh version-1 document.
"""

from .engine import apply_patch, apply_patch_with_report, create_document

__all__ = [
    "apply_patch",
    "apply_patch_with_report",
    "create_document",
]
