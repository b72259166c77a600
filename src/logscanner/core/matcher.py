"""Search term registry and case-insensitive substring matching."""

from __future__ import annotations


def normalize_term(term: str | None) -> str:
    """Trim and lowercase a search term."""
    return (term or "").strip().lower()


class SearchMatcher:
    """Holds the active search terms and how often each one has matched."""

    def __init__(self) -> None:
        self._terms: set[str] = set()
        self._hits: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and normalize_term(term) in self._terms

    def add_term(self, term: str) -> bool:
        """Register a term. Returns False for blank or already-known terms."""
        normalized = normalize_term(term)
        if not normalized or normalized in self._terms:
            return False
        self._terms.add(normalized)
        self._hits[normalized] = 0
        return True

    def remove_term(self, term: str) -> bool:
        """Drop a term and its hit counter. Returns False if it was not registered."""
        normalized = normalize_term(term)
        if normalized not in self._terms:
            return False
        self._terms.discard(normalized)
        self._hits.pop(normalized, None)
        return True

    def clear(self) -> None:
        self._terms.clear()
        self._hits.clear()

    def terms(self) -> list[str]:
        return sorted(self._terms)

    def match_count(self, term: str) -> int:
        return self._hits.get(normalize_term(term), 0)

    def hit_counts(self) -> dict[str, int]:
        return {term: self._hits[term] for term in sorted(self._hits)}

    def find_matches(self, text: str | None) -> list[str]:
        """Return the sorted terms contained in ``text``, bumping each one's hit count."""
        if not text or not self._terms:
            return []

        lowered = text.lower()
        matches = sorted(term for term in self._terms if term in lowered)
        for term in matches:
            self._hits[term] += 1
        return matches
