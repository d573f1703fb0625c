"""EngineerProfilePolicy — derive capability profiles from work history."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from grooming.domain.entities.engineer_profile import EngineerProfile
from grooming.domain.entities.work_record import WorkRecord
from grooming.domain.value_objects.profile_rules import ProfileRules


def count_workload(records: Iterable[WorkRecord], rules: ProfileRules) -> int:
    """Number of records currently in an active status."""
    return sum(1 for r in records if rules.is_active(r.status))


def derive_specializations(
    records: Sequence[WorkRecord],
    rules: ProfileRules,
) -> list[str]:
    """Top components first, then top non-generic labels.

    Ranking is by descending frequency; ``Counter.most_common`` keeps
    first-seen order for equal counts, which is the tie-break we want.

    Args:
        records: engineer's historical tickets, most recent first.
        rules: stoplists and the number of components / labels to keep.

    Returns:
        Up to ``top_components + top_labels`` names (may be empty).
    """
    component_counts: Counter[str] = Counter()
    label_counts: Counter[str] = Counter()

    for record in records:
        component_counts.update(record.components)
        label_counts.update(
            label for label in record.labels if not rules.is_generic_label(label)
        )

    top_components = [name for name, _ in component_counts.most_common(rules.top_components)]
    top_labels = [name for name, _ in label_counts.most_common(rules.top_labels)]
    return top_components + top_labels


def build_engineer_profile(
    name: str,
    records: Sequence[WorkRecord],
    rules: ProfileRules,
) -> EngineerProfile:
    return EngineerProfile(
        name=name,
        recent_tickets=tuple(records),
        current_workload=count_workload(records, rules),
        specializations=tuple(derive_specializations(records, rules)),
    )


def build_engineer_profiles(
    history: Mapping[str, Sequence[WorkRecord]],
    rules: ProfileRules | None = None,
) -> list[EngineerProfile]:
    """Pure function: one profile per engineer, skipping the unassigned bucket.

    Engineers with no history still get a profile (empty lists, zero load).
    Output order follows the input mapping.
    """
    rules = rules or ProfileRules()
    return [
        build_engineer_profile(name, records, rules)
        for name, records in history.items()
        if name != rules.unassigned_name
    ]
