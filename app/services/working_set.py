"""Working-set selection and combined summaries."""

from collections.abc import Collection
from typing import Optional, Sequence

from app.models.analytics import StatsEnvelopeSummary
from app.models.parts import Part
from app.services.envelope import calculate_envelope
from app.services.statistics import calculate_aggregate_stats


def select_working_set(catalog: Sequence[Part], callouts: Optional[Collection[str]]) -> list[Part]:
    """Parts of the catalog whose callout is in the working set, in catalog order.

    None means no membership filter: the whole catalog is selected.
    """
    if callouts is None:
        return list(catalog)
    members = set(callouts)
    return [part for part in catalog if part.callout in members]


def calculate_summary(parts: Sequence[Part]) -> StatsEnvelopeSummary:
    """Aggregate statistics and worst-case envelope of the same parts."""
    return StatsEnvelopeSummary(
        stats=calculate_aggregate_stats(parts),
        envelope=calculate_envelope(parts),
        is_empty=len(parts) == 0,
    )
