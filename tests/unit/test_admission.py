from datetime import datetime, timezone

from feedguard.core.admission import (
    admit, compare_priority, order_by_priority, rank_sources, select_recommended
)
from feedguard.core.models import FeedSource, PerformanceSummary, RankedSource

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _ranked(source_id, reliability, priority, multiplier=1.0):
    performance = PerformanceSummary(
        source_id=source_id,
        average_response_time=3000,
        success_rate=1.0,
        content_quality=70,
        reliability=reliability,
        last_checked=NOW,
    )
    return RankedSource(
        source=FeedSource(id=source_id, priority=priority),
        performance=performance,
        adaptive_timeout=6000,
        quality_multiplier=multiplier,
    )


def _ids(ranked):
    return [r.id for r in ranked]


class TestOrdering:
    def test_large_reliability_gap_beats_priority(self):
        a = _ranked("a", 90, 5)
        b = _ranked("b", 60, 1)

        assert _ids(order_by_priority([b, a])) == ["a", "b"]

    def test_reliability_above_cap_does_not_count(self):
        # capped at 85 the gap is only 5, so priority decides
        a = _ranked("a", 100, 2)
        b = _ranked("b", 80, 1)

        assert _ids(order_by_priority([a, b])) == ["b", "a"]

    def test_equal_priority_prefers_less_proven_source(self):
        a = _ranked("a", 75, 3)
        b = _ranked("b", 70, 3)

        assert _ids(order_by_priority([a, b])) == ["b", "a"]

    def test_uncapped_tiebreak_above_cap(self):
        a = _ranked("a", 100, 3)
        b = _ranked("b", 90, 3)

        assert _ids(order_by_priority([a, b])) == ["b", "a"]

    def test_gap_of_exactly_fifteen_falls_through_to_priority(self):
        a = _ranked("a", 75, 2)
        b = _ranked("b", 60, 1)

        assert compare_priority(a, b) > 0
        assert _ids(order_by_priority([a, b])) == ["b", "a"]

    def test_comparator_is_antisymmetric(self):
        pairs = [
            (_ranked("a", 90, 5), _ranked("b", 60, 1)),
            (_ranked("a", 100, 2), _ranked("b", 80, 1)),
            (_ranked("a", 75, 3), _ranked("b", 70, 3)),
        ]
        for a, b in pairs:
            assert compare_priority(a, b) == -compare_priority(b, a)


class TestRecommended:
    def test_filters_and_sorts_by_weighted_score(self):
        ranked = [
            _ranked("steady", 85, 1, multiplier=1.2),
            _ranked("ok", 95, 2, multiplier=1.0),
            _ranked("weak", 55, 3, multiplier=0.8),
            _ranked("edge", 60, 4, multiplier=1.0),
        ]

        selected = select_recommended(ranked, max_sources=10, min_reliability=60)

        assert _ids(selected) == ["steady", "ok", "edge"]

    def test_truncates_to_max_sources(self):
        ranked = [_ranked(f"s{i}", 70 + i, i) for i in range(5)]

        selected = select_recommended(ranked, max_sources=2, min_reliability=0)

        assert _ids(selected) == ["s4", "s3"]

    def test_zero_max_sources(self):
        assert select_recommended([_ranked("a", 90, 1)], max_sources=0) == []


class TestRankAndAdmit:
    def test_rank_sources_attaches_timeout_and_multiplier(self):
        def summarize(source_id):
            reliability = {"fast": 90, "slow": 40}[source_id]
            return PerformanceSummary(
                source_id=source_id,
                average_response_time=2000 if source_id == "fast" else 9000,
                success_rate=1.0,
                content_quality=70,
                reliability=reliability,
                last_checked=NOW,
            )

        ranked = rank_sources([FeedSource(id="fast"), FeedSource(id="slow")], summarize)

        by_id = {r.id: r for r in ranked}
        assert by_id["fast"].adaptive_timeout == 4000
        assert by_id["fast"].quality_multiplier == 1.2
        assert by_id["slow"].adaptive_timeout == 12000
        assert by_id["slow"].quality_multiplier == 0.8

    def test_admit_drops_disabled_and_blocked_sources(self):
        sources = [
            FeedSource(id="on"),
            FeedSource(id="off", enabled=False),
            FeedSource(id="blocked"),
        ]

        admitted = admit(sources, lambda source_id: source_id != "blocked")

        assert [s.id for s in admitted] == ["on"]
