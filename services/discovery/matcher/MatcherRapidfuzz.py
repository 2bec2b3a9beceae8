from rapidfuzz import fuzz, utils

from services.discovery.matcher.MatcherInterface import MatcherInterface


class MatcherRapidfuzz(MatcherInterface):
    """Matcher backed by rapidfuzz's weighted ratio.

    Both sides are normalized with rapidfuzz's default processor (lowercase,
    non-alphanumerics to whitespace, trimmed). WRatio then picks the best of
    plain, partial and token-based ratios, which covers typos, partial tokens
    and reordered words.

    Scoring is symmetric: score(a, b) == score(b, a). A longer value can
    therefore fold into a shorter, earlier label ("John Doe" into "John") as
    readily as the other way round.
    """

    def score(self, query: str, value: str) -> float:
        processed_query = utils.default_process(query)
        processed_value = utils.default_process(value)
        if not processed_query or not processed_value:
            return 1.0
        if processed_query == processed_value:
            return 0.0
        similarity = fuzz.WRatio(processed_query, processed_value)
        return round(1.0 - similarity / 100.0, 4)
