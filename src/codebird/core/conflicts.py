"""Change-set conflict detection.

Change sets are compared as whole change-description strings. Two branches
conflict when any description appears verbatim on both sides; descriptions
are never split back into file names.
"""

from typing import Iterable, List


def has_conflict(changes_a: Iterable[str], changes_b: Iterable[str]) -> bool:
    """Check whether any change in ``changes_a`` also appears in ``changes_b``."""
    seen = set(changes_b)
    return any(change in seen for change in changes_a)


def conflicting_changes(changes_a: Iterable[str], changes_b: Iterable[str]) -> List[str]:
    """List the changes of ``changes_a`` that also appear in ``changes_b``."""
    seen = set(changes_b)
    return [change for change in changes_a if change in seen]
