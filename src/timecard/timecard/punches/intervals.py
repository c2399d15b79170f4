"""Overlap detection between punches of one worker.

Intervals are half-open ``[time_in, time_out)``, so a punch that ends exactly
when another starts does not collide with it. A punch with no ``time_out`` is
treated as running forever.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.enums import OverlapCase, PunchStatus
from ..core.exceptions import OverlapDetected
from .model import Punch

OPEN_END = datetime.max.replace(tzinfo=timezone.utc)


def effective_end(punch: Punch) -> datetime:
    return punch.time_out if punch.time_out is not None else OPEN_END


def overlap_case(candidate: Punch, existing: Punch) -> Optional[OverlapCase]:
    """Which way ``candidate`` collides with ``existing``, or None."""
    s1, e1 = candidate.time_in, effective_end(candidate)
    s2, e2 = existing.time_in, effective_end(existing)

    if not (s1 < e2 and s2 < e1):
        return None
    if s2 < s1 and e1 < e2:
        return OverlapCase.WITHIN_EXISTING
    if s1 < s2 and e2 < e1:
        return OverlapCase.CONTAINS_EXISTING
    if s2 <= s1 < e2:
        return OverlapCase.STARTS_DURING
    return OverlapCase.ENDS_DURING


def overlaps(candidate: Punch, existing: Punch) -> bool:
    if candidate.applicant_id != existing.applicant_id:
        return False
    return overlap_case(candidate, existing) is not None


def _counts(punch: Punch) -> bool:
    return punch.status != PunchStatus.CANCELLED


def find_conflicts(candidate: Punch, existing: Iterable[Punch], *, exclude_id: Optional[str] = None) -> List[Punch]:
    exclude = exclude_id if exclude_id is not None else candidate.punch_id
    return [
        other
        for other in existing
        if other.punch_id != exclude and _counts(other) and overlaps(candidate, other)
    ]


def ensure_no_overlap(candidate: Punch, existing: Iterable[Punch], *, exclude_id: Optional[str] = None) -> None:
    conflicts = find_conflicts(candidate, existing, exclude_id=exclude_id)
    if conflicts:
        ids = [c.punch_id for c in conflicts]
        raise OverlapDetected(
            f"Punch overlaps {len(ids)} existing punch(es): {', '.join(ids)}",
            conflicting_ids=ids,
        )


def pairwise_conflicts(punches: Sequence[Punch]) -> List[Tuple[str, str]]:
    """All overlapping (earlier, later) id pairs, sweeping in start order."""
    ordered = sorted((p for p in punches if _counts(p)), key=lambda p: (p.time_in, p.punch_id))
    pairs: List[Tuple[str, str]] = []
    for i, first in enumerate(ordered):
        first_end = effective_end(first)
        for second in ordered[i + 1:]:
            if second.time_in >= first_end:
                break
            if overlaps(first, second):
                pairs.append((first.punch_id, second.punch_id))
    return pairs
