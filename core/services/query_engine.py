"""Query Engine: filtered and sorted views over the Record Store."""

import unicodedata
from collections.abc import Callable, Iterable
from typing import Any

from core.domain.models import PatientRecord, SortKey


def collation_key(text: str) -> tuple[str, str, str]:
    """
    Alphabetic sort key that does not depend on the process locale.

    Accents and case are ignored for the primary comparison, so "Émile" sorts
    with "Emile" and "bilal" with "Bilal". Case-folded text and then the raw
    text break ties so the ordering is total.
    """
    folded = text.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded, text)


_SORT_KEYS: dict[SortKey, Callable[[PatientRecord], Any]] = {
    SortKey.NAME: lambda r: collation_key(r.name),
    SortKey.AGE: lambda r: r.age,
    SortKey.CONDITION: lambda r: collation_key(r.condition.value),
}


def matches(record: PatientRecord, query: str) -> bool:
    """Case-insensitive substring match against name or condition."""
    needle = query.strip().casefold()
    if not needle:
        return True
    return needle in record.name.casefold() or needle in record.condition.value.casefold()


def view(
    records: Iterable[PatientRecord],
    query: str = "",
    sort_key: SortKey | str = SortKey.NONE,
) -> list[PatientRecord]:
    """
    Derive the displayed list: filter by query, then sort.

    Never mutates `records`. Sorting is stable, so ties keep store order.
    """
    key = SortKey(sort_key)
    result = [r for r in records if matches(r, query)]
    if key is not SortKey.NONE:
        result.sort(key=_SORT_KEYS[key])
    return result
