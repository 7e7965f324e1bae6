"""Report Aggregator: condition counts over the full store."""

from collections import Counter
from collections.abc import Iterable

from core.domain.models import BUCKETS, Condition, ConditionReport, PatientRecord


def count_by_condition(records: Iterable[PatientRecord]) -> tuple[int, dict[Condition, int]]:
    """Total plus per-bucket counts; every bucket is present, even at zero."""
    total = 0
    counter: Counter[Condition] = Counter()
    for record in records:
        total += 1
        counter[record.condition] += 1
    return total, {bucket: counter[bucket] for bucket in BUCKETS}


def report(records: Iterable[PatientRecord]) -> ConditionReport:
    """Independent of any active search or sort; pass the whole store."""
    total, per_condition = count_by_condition(records)
    return ConditionReport(total=total, per_condition=per_condition)
