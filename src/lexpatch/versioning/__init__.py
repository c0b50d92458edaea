"""Version history.

Exports
-------
create_snapshot
    Immutable deep copy of a document.
add_version_snapshot
    Append to a bounded, deduplicated history.
restore_version
    Look up a history entry by id.
"""

from .history import MAX_VERSION_HISTORY, add_version_snapshot, create_snapshot, restore_version

__all__ = [
    "MAX_VERSION_HISTORY",
    "add_version_snapshot",
    "create_snapshot",
    "restore_version",
]
