"""Canonical value normalization.

Near-duplicate owner/company/type/country strings ("John Doe", "Jon Doe",
"JOHN DOE") are folded into a single canonical label per real-world entity.
The first raw value seen for an entity becomes its label, so labels depend on
the order documents are folded in.
"""

from collections.abc import Iterable, Sequence

from services.discovery.matcher.MatcherInterface import MatcherInterface
from shared.models.document import Document, FilterCategory


class Canonicalizer:
    """Maps raw values onto an existing canonical label, or promotes them to a new one."""

    def __init__(self, matcher: MatcherInterface, threshold: float = 0.2) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("Canonicalization threshold must be within [0, 1], got %r" % threshold)
        self._matcher = matcher
        self.threshold = threshold

    def canonicalize(self, raw_value: str, registry: Iterable[str]) -> str:
        """Return the canonical label for a raw value.

        The registry is not modified: inserting a newly promoted value is up
        to the caller (see CanonicalRegistry.add).

        Args:
            raw_value (str): The value as found on a document.
            registry (Iterable[str]): Canonical labels seen so far, in insertion order.

        Returns:
            str: The exact registry member if present, else the closest member
                within the threshold (earliest inserted on ties), else raw_value.
        """
        members: Sequence[str] = registry if isinstance(registry, Sequence) else list(registry)
        if raw_value in members:
            return raw_value
        matches = self._matcher.search(raw_value, members, threshold=self.threshold)
        if matches:
            return matches[0].item
        return raw_value


class CanonicalRegistry:
    """Ordered set of canonical labels for one filter category, plus the raw→label mapping."""

    def __init__(self, canonicalizer: Canonicalizer) -> None:
        self._canonicalizer = canonicalizer
        self._values: list[str] = []
        self._mapping: dict[str, str] = {}

    def add(self, raw_value: str) -> str:
        """Fold a raw value into the registry and return its canonical label."""
        if raw_value in self._mapping:
            return self._mapping[raw_value]
        canonical = self._canonicalizer.canonicalize(raw_value, self._values)
        if canonical not in self._values:
            self._values.append(canonical)
        self._mapping[raw_value] = canonical
        return canonical

    def resolve(self, raw_value: str | None) -> str | None:
        """Canonical label of a raw value already folded in, None if unknown."""
        if raw_value is None:
            return None
        return self._mapping.get(raw_value)

    def get_values(self) -> list[str]:
        """Canonical labels in insertion order."""
        return list(self._values)

    def get_options(self) -> list[str]:
        """Canonical labels sorted for display."""
        return sorted(self._values)

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __len__(self) -> int:
        return len(self._values)


def build_registries(
    documents: Iterable[Document],
    canonicalizer: Canonicalizer,
) -> dict[FilterCategory, CanonicalRegistry]:
    """Build one registry per filter category from a document sequence.

    Documents still being processed carry placeholder values and are skipped.

    Args:
        documents (Iterable[Document]): The current collection, in feed order.
        canonicalizer (Canonicalizer): Shared canonicalizer.

    Returns:
        dict[FilterCategory, CanonicalRegistry]: Registries keyed by category.
    """
    registries = {category: CanonicalRegistry(canonicalizer) for category in FilterCategory}
    for document in documents:
        if document.is_processing:
            continue
        for category, registry in registries.items():
            value = document.get_filter_value(category)
            if value:
                registry.add(value)
    return registries
