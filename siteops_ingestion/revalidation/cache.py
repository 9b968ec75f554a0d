"""Read-through cache of lookup candidates, with "did you mean" suggestions."""

from __future__ import annotations

import difflib
from dataclasses import dataclass

from siteops_ingestion.domain.types import LookupTarget
from siteops_ingestion.revalidation.reference import ReferenceEntry, ReferenceSource


@dataclass(frozen=True)
class LookupMatch:
    id: str | None
    suggestion: str | None = None

    @property
    def found(self) -> bool:
        return self.id is not None


class _Index:
    """Case-insensitive key -> entry, over names and alternate keys."""

    def __init__(self, entries: list[ReferenceEntry]):
        self.by_key: dict[str, ReferenceEntry] = {}
        self.names: dict[str, str] = {}
        for entry in entries:
            self.by_key.setdefault(entry.name.strip().lower(), entry)
            self.names.setdefault(entry.name.strip().lower(), entry.name)
            for alt in entry.alternates:
                self.by_key.setdefault(alt.strip().lower(), entry)

    def suggest(self, value: str) -> str | None:
        # Substring containment first, then the closest spelling.
        for key, name in self.names.items():
            if value in key or key in value:
                return name
        close = difflib.get_close_matches(value, list(self.names), n=1, cutoff=0.6)
        return self.names[close[0]] if close else None


class ReferenceCache:
    """
    Lookup candidates per (target, site), loaded on first use.

    Passed explicitly to whoever resolves lookups; ``refresh()`` drops
    everything so the next resolve re-reads the source.
    """

    def __init__(self, source: ReferenceSource):
        self._source = source
        self._indexes: dict[tuple[LookupTarget, str | None], _Index] = {}

    def _index(self, target: LookupTarget, site_id: str | None) -> _Index:
        key = (target, site_id if target.site_scoped else None)
        index = self._indexes.get(key)
        if index is None:
            index = _Index(self._source.fetch(target, site_id))
            self._indexes[key] = index
        return index

    def resolve(self, target: LookupTarget, value: str, site_id: str | None) -> LookupMatch:
        """Case-insensitive match on the name or any alternate key."""
        wanted = value.strip().lower()
        if not wanted:
            return LookupMatch(id=None)
        index = self._index(target, site_id)
        entry = index.by_key.get(wanted)
        if entry is not None:
            return LookupMatch(id=entry.id)
        return LookupMatch(id=None, suggestion=index.suggest(wanted))

    def refresh(self) -> None:
        self._indexes.clear()
