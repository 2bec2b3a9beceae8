from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from services.discovery.models import MatchResult


class MatcherInterface(ABC):
    """Approximate matching of a query against strings or multi-field records.

    Subclasses only provide the pairwise dissimilarity in score(); ranking,
    thresholding and field access live here so that the string-matching
    library can be swapped without touching the canonicalizer or the filter
    engine.
    """

    ##########################################
    ################ SCORING #################
    ##########################################

    @abstractmethod
    def score(self, query: str, value: str) -> float:
        """Dissimilarity between a query and one field value.

        Args:
            query (str): The search query.
            value (str): A single string value of a candidate.

        Returns:
            float: Normalized dissimilarity in [0, 1], 0 meaning an exact match.
        """
        pass

    def score_candidate(self, query: str, candidate: Any, keys: Sequence[str] | None = None) -> float | None:
        """Best (lowest) score of a candidate across its configured fields.

        Args:
            query (str): The search query.
            candidate (Any): A plain string or a record.
            keys (Sequence[str] | None): Field names to search on records. Ignored for strings.

        Returns:
            float | None: The best score, or None if the candidate has no searchable value.
        """
        best: float | None = None
        for value in self._get_values(candidate, keys):
            current = self.score(query, value)
            if best is None or current < best:
                best = current
                if best == 0.0:
                    break
        return best

    ##########################################
    ################ SEARCH ##################
    ##########################################

    def search(
        self,
        query: str,
        candidates: Sequence[Any],
        keys: Sequence[str] | None = None,
        threshold: float = 0.4,
    ) -> list[MatchResult]:
        """Return the candidates matching the query, best match first.

        Candidates scoring strictly above the threshold are dropped. Ties keep
        the original candidate order.

        Args:
            query (str): The search query. A blank query matches nothing.
            candidates (Sequence[Any]): Strings or records to search.
            keys (Sequence[str] | None): Fields to search on records. A hit in any field qualifies the record.
            threshold (float): Maximum accepted dissimilarity in [0, 1].

        Returns:
            list[MatchResult]: Matches sorted ascending by score.

        Raises:
            ValueError: If threshold is outside [0, 1].
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("Match threshold must be within [0, 1], got %r" % threshold)
        if not query or not query.strip():
            return []

        results: list[MatchResult] = []
        for index, candidate in enumerate(candidates):
            score = self.score_candidate(query, candidate, keys)
            if score is None or score > threshold:
                continue
            results.append(MatchResult(item=candidate, score=score, index=index))

        # sort is stable, index only makes the tie-break explicit
        results.sort(key=lambda result: (result.score, result.index))
        return results

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _get_values(self, candidate: Any, keys: Sequence[str] | None) -> list[str]:
        """Collect the non-empty string values of a candidate's fields.

        Missing fields and non-string values are skipped, so an incomplete
        record simply does not match on that field.
        """
        if isinstance(candidate, str):
            return [candidate] if candidate.strip() else []
        if not keys:
            return []

        values: list[str] = []
        for key in keys:
            if isinstance(candidate, Mapping):
                raw = candidate.get(key)
            else:
                raw = getattr(candidate, key, None)
            if isinstance(raw, str):
                raw = [raw]
            if not isinstance(raw, (list, tuple, set)):
                continue
            values.extend(v for v in raw if isinstance(v, str) and v.strip())
        return values
