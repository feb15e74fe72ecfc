from __future__ import annotations

from typing import Callable, Dict, Optional


class SlugDictionary:
    """Occurrence counters for base slugs within one import scope.

    The first occurrence keeps the base slug, later ones get "-2", "-3", ...
    Scopes are independent: one dictionary per question set import and one
    per team namespace in a tournament import.
    """

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}

    def __contains__(self, base_slug: str) -> bool:
        return base_slug in self._counters

    def __len__(self) -> int:
        return len(self._counters)

    def assign(self, base_slug: str, is_taken: Optional[Callable[[str], bool]] = None) -> str:
        """Return the next free slug for ``base_slug``.

        ``is_taken`` lets the caller skip over slugs already present in the
        store (written by an earlier run or another scope).
        """
        if base_slug in self._counters:
            self._counters[base_slug] += 1
            slug = f"{base_slug}-{self._counters[base_slug]}"
        else:
            self._counters[base_slug] = 1
            slug = base_slug

        if is_taken is not None:
            while is_taken(slug):
                self._counters[base_slug] += 1
                slug = f"{base_slug}-{self._counters[base_slug]}"

        return slug
