"""Tests for the in-memory stats aggregator."""

from conftest import make_message

from logscanner.core.aggregator import StatsAggregator
from logscanner.models.runtime import StatsSnapshot


class TestTrack:
    def test_new_key_reported_once(self):
        agg = StatsAggregator()
        assert agg.track(make_message()) is True
        assert agg.track(make_message()) is False

    def test_empty_source_or_subsystem_ignored(self):
        agg = StatsAggregator()
        assert agg.track(make_message(source="")) is False
        assert agg.track(make_message(subsystem="")) is False
        assert agg.get_total_messages() == 0
        assert agg.get_all_sender_ips() == []

    def test_accumulates_sets(self):
        agg = StatsAggregator()
        agg.track(make_message(level="INFO", ip="10.0.0.2"))
        agg.track(make_message(level="ERROR", ip="10.0.0.1"))
        agg.track(make_message(level="INFO", ip="10.0.0.2"))
        [rec] = agg.get_all_stats()
        assert rec.count == 3
        assert rec.sender_ips == ("10.0.0.1", "10.0.0.2")
        assert rec.log_levels == ("ERROR", "INFO")

    def test_search_matches_union_sorted(self):
        agg = StatsAggregator()
        agg.track(make_message(), ["timeout"])
        agg.track(make_message(), ["error", "timeout"])
        agg.track(make_message())
        [rec] = agg.get_all_stats()
        assert rec.search_matches == ("error", "timeout")

    def test_blank_level_not_recorded(self):
        agg = StatsAggregator()
        agg.track(make_message(level=""))
        assert agg.get_all_stats()[0].log_levels == ()

    def test_global_sender_ips(self):
        agg = StatsAggregator()
        agg.track(make_message(ip="10.0.0.9"))
        agg.track(make_message(subsystem="Other", ip="10.0.0.3"))
        assert agg.get_all_sender_ips() == ["10.0.0.3", "10.0.0.9"]


class TestInvariants:
    def test_totals_match_counts(self):
        agg = StatsAggregator()
        keys = [("a", "x"), ("a", "y"), ("b", "x")]
        n = 0
        for i in range(30):
            source, subsystem = keys[i % len(keys)]
            agg.track(make_message(source=source, subsystem=subsystem))
            n += 1
        stats = agg.get_all_stats()
        assert agg.get_total_messages() == n
        assert sum(r.count for r in stats) == n
        assert agg.get_unique_subsystem_count() == len(keys)

    def test_ordering(self):
        agg = StatsAggregator()
        for source, subsystem in [("b", "a"), ("a", "z"), ("a", "b")]:
            agg.track(make_message(source=source, subsystem=subsystem))
        order = [(r.source, r.subsystem) for r in agg.get_all_stats()]
        assert order == [("a", "b"), ("a", "z"), ("b", "a")]


class TestReset:
    def test_clears_everything(self):
        agg = StatsAggregator()
        agg.track(make_message(), ["x"])
        agg.reset()
        assert agg.get_all_stats() == []
        assert agg.get_total_messages() == 0
        assert agg.get_unique_subsystem_count() == 0
        assert agg.get_all_sender_ips() == []

    def test_key_is_new_again_after_reset(self):
        agg = StatsAggregator()
        agg.track(make_message())
        agg.reset()
        assert agg.track(make_message()) is True


class TestExportSnapshot:
    def test_shape(self):
        agg = StatsAggregator()
        agg.track(make_message(), ["hello"])
        snap = agg.export_snapshot()
        assert isinstance(snap, StatsSnapshot)
        d = snap.to_dict()
        assert d["totalMessages"] == 1
        assert d["uniqueSubsystems"] == 1
        assert d["timestamp"].endswith("Z")
        assert d["stats"] == [{
            "source": "app",
            "subsystem": "Persistence",
            "count": 1,
            "senderIps": ["10.0.0.1"],
            "logLevels": ["INFO"],
            "searchMatches": ["hello"],
        }]

    def test_idempotent(self):
        agg = StatsAggregator()
        agg.track(make_message())
        agg.track(make_message(source="b"))
        assert agg.export_snapshot().stats == agg.export_snapshot().stats

    def test_not_affected_by_later_tracking(self):
        agg = StatsAggregator()
        agg.track(make_message())
        snap = agg.export_snapshot()
        agg.track(make_message(ip="10.9.9.9"))
        assert snap.total_messages == 1
        assert snap.stats[0].count == 1
        assert snap.stats[0].sender_ips == ("10.0.0.1",)

    def test_not_affected_by_reset(self):
        agg = StatsAggregator()
        agg.track(make_message())
        snap = agg.export_snapshot()
        agg.reset()
        assert snap.total_messages == 1
        assert len(snap.stats) == 1
