"""Tests for pattern catalogs and adaptive reordering."""

from concurrent.futures import ThreadPoolExecutor
from threading import Event

from adaptive_uaparser.catalog import NO_MATCH, PatternCatalog
from adaptive_uaparser.models import UserAgent, UserAgentRule
from adaptive_uaparser.patterns import UserAgentPattern


def _catalog(*regexes, miss_threshold=3, acceptable_index=0):
    patterns = [UserAgentPattern(UserAgentRule(regex=regex)) for regex in regexes]
    return PatternCatalog(
        name="user_agent_parsers",
        patterns=patterns,
        result_type=UserAgent,
        miss_threshold=miss_threshold,
        acceptable_index=acceptable_index,
    )


def _order(catalog):
    return [pattern.rule.regex for pattern in catalog.patterns]


class TestLookup:
    """Test first-match-wins lookup."""

    def test_first_match_wins(self):
        catalog = _catalog("(Edg)e?/", "(Chrome)/", "(Safari)/")
        result, index = catalog.lookup("Chrome/119.0 Safari/537.36 Edg/119.0")
        assert result.family == "Edg"
        assert index == 0

    def test_later_patterns_not_counted(self):
        catalog = _catalog("(Chrome)/", "(Safari)/")
        catalog.lookup("Chrome/120 Safari/537")
        counts = [p.match_count for p in catalog.patterns]
        assert counts == [1, 0]

    def test_skips_patterns_without_family(self):
        """A regex match with an empty family falls through to the next pattern."""
        catalog = _catalog("Chrome", "(Chrome)")
        result, index = catalog.lookup("Chrome/120")
        assert result.family == "Chrome"
        assert index == 1

    def test_no_match_is_other(self):
        catalog = _catalog("(Chrome)/")
        result, index = catalog.lookup("curl/8.0")
        assert result == UserAgent(family="Other")
        assert index == NO_MATCH

    def test_empty_catalog(self):
        catalog = _catalog()
        result, index = catalog.lookup("anything")
        assert result.family == "Other"
        assert index == NO_MATCH

    def test_no_match_returns_fresh_record(self):
        catalog = _catalog()
        first, _ = catalog.lookup("a")
        second, _ = catalog.lookup("b")
        assert first == second
        assert first is not second


class TestMissCounting:
    """Test which lookups count as misses."""

    def test_match_within_acceptable_index(self):
        catalog = _catalog("(Firefox)", "(Chrome)", acceptable_index=1)
        catalog.lookup("Chrome")
        assert catalog.misses == 0

    def test_match_beyond_acceptable_index(self):
        catalog = _catalog("(Firefox)", "(Chrome)", acceptable_index=0)
        catalog.lookup("Chrome")
        assert catalog.misses == 1

    def test_no_match_is_a_miss(self):
        catalog = _catalog("(Firefox)", acceptable_index=5)
        catalog.lookup("Chrome")
        assert catalog.misses == 1


class TestReorder:
    """Test adaptive reordering."""

    def test_not_due_below_threshold(self):
        catalog = _catalog("(Firefox)", "(Chrome)", miss_threshold=3)
        catalog.lookup("Chrome")
        catalog.lookup("Chrome")
        assert catalog.reorder_if_due() is False
        assert _order(catalog) == ["(Firefox)", "(Chrome)"]
        assert catalog.misses == 2

    def test_reorders_at_threshold(self):
        """The most matched pattern moves first and misses reset."""
        catalog = _catalog("(Firefox)", "(Chrome)", "(Safari)", miss_threshold=3)
        for _ in range(3):
            catalog.lookup("Chrome")

        assert catalog.reorder_if_due() is True
        assert _order(catalog) == ["(Chrome)", "(Firefox)", "(Safari)"]
        assert catalog.misses == 0

        result, index = catalog.lookup("Chrome")
        assert result.family == "Chrome"
        assert index == 0
        assert catalog.misses == 0

    def test_sort_is_stable(self):
        """Equal counts keep their relative order."""
        catalog = _catalog("(A)", "(B)", "(C)", "(D)", miss_threshold=1)
        catalog.lookup("D")
        catalog.lookup("B")
        catalog.reorder()
        assert _order(catalog) == ["(B)", "(D)", "(A)", "(C)"]

    def test_sorted_catalog_unchanged(self):
        catalog = _catalog("(A)", "(B)", "(C)", miss_threshold=1)
        catalog.lookup("A")
        catalog.reorder()
        before = _order(catalog)
        catalog.reorder()
        assert _order(catalog) == before

    def test_counts_accumulate_across_reorders(self):
        catalog = _catalog("(A)", "(B)", miss_threshold=1)
        catalog.lookup("B")
        catalog.reorder_if_due()
        catalog.lookup("A")
        catalog.lookup("A")
        counts = {p.rule.regex: p.match_count for p in catalog.patterns}
        assert counts == {"(A)": 2, "(B)": 1}

    def test_stats(self):
        catalog = _catalog("(A)", "(B)", miss_threshold=10)
        catalog.lookup("B")
        stats = catalog.stats()
        assert stats["name"] == "user_agent_parsers"
        assert stats["misses"] == 1
        assert stats["miss_threshold"] == 10
        assert stats["patterns"] == [
            {"regex": "(A)", "match_count": 0},
            {"regex": "(B)", "match_count": 1},
        ]


class TestConcurrency:
    """Test lookups and reorders from many threads."""

    def test_counts_are_not_lost(self):
        catalog = _catalog("(A)", "(B)", "(C)", "(D)", miss_threshold=5)
        lines = ["A", "B", "C", "D", "E"] * 200

        def worker():
            for line in lines:
                catalog.lookup(line)
                catalog.reorder_if_due()

        with ThreadPoolExecutor(max_workers=8) as pool:
            for future in [pool.submit(worker) for _ in range(8)]:
                future.result()

        counts = {p.rule.regex: p.match_count for p in catalog.patterns}
        assert counts == {"(A)": 1600, "(B)": 1600, "(C)": 1600, "(D)": 1600}
        assert sorted(_order(catalog)) == ["(A)", "(B)", "(C)", "(D)"]

    def test_lookups_see_complete_order_during_reorders(self):
        """Lookups racing a sort always scan one whole, duplicate-free order."""
        regexes = ["(A)", "(B)", "(C)", "(D)"]
        catalog = _catalog(*regexes, miss_threshold=1)
        stop = Event()
        errors = []

        def sorter():
            while not stop.is_set():
                catalog.reorder()
                order = _order(catalog)
                if sorted(order) != regexes:
                    errors.append(order)

        def reader(line):
            for _ in range(2000):
                result, index = catalog.lookup(line)
                if result.family != line or not 0 <= index < len(regexes):
                    errors.append((line, result, index))

        with ThreadPoolExecutor(max_workers=5) as pool:
            sorting = pool.submit(sorter)
            readers = [pool.submit(reader, line) for line in "ABCD"]
            try:
                for future in readers:
                    future.result()
            finally:
                stop.set()
            sorting.result()

        assert errors == []
        counts = {p.rule.regex: p.match_count for p in catalog.patterns}
        assert counts == {regex: 2000 for regex in regexes}
