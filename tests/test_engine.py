from tetrascan.detection.engine import InstantAggregator, ScheduledAggregator
from tetrascan.detection.types import DetectionEvent, ElapsedInterval, coalesce_intervals


def _event(freq: int, peak: float, count: int, t: int) -> DetectionEvent:
    return DetectionEvent(frequency_hz=freq, peak=peak, sample_count=count, interval=ElapsedInterval(t, t + 1))


def test_instant_without_events_emits_single_placeholder() -> None:
    assert InstantAggregator().finalize() == {"1": {"freq": 0, "max_strength": 0, "sample_count": 0}}


def test_instant_ids_start_at_one_in_encounter_order() -> None:
    agg = InstantAggregator()
    assert agg.add(_event(400_000_000, 50.5, 10, 0)) == "1"
    assert agg.add(_event(381_000_000, 52.0, 12, 1)) == "2"
    result = agg.finalize()
    assert list(result) == ["1", "2"]
    assert result["1"] == {"freq": 400.0, "strength": 50.5, "sample_count": 10}
    assert result["2"]["freq"] == 381.0


def test_scheduled_repeat_detection_is_last_write_wins() -> None:
    agg = ScheduledAggregator()
    agg.add(_event(382_000_000, 55.0, 100, 2))
    agg.add(_event(382_000_000, 50.0, 80, 7))
    result = agg.finalize()
    assert result == {
        "0": {"freq": 382.0, "strength": 50.0, "sample_count": 80, "tetra_durations": "2-3,7-8"},
    }


def test_scheduled_ids_follow_first_seen_order_not_frequency() -> None:
    agg = ScheduledAggregator()
    assert agg.add(_event(410_000_000, 50.0, 1, 0)) == "0"
    assert agg.add(_event(385_000_000, 50.0, 1, 1)) == "1"
    assert agg.add(_event(410_000_000, 51.0, 1, 5)) == "0"
    result = agg.finalize()
    assert [rec["freq"] for rec in result.values()] == [410.0, 385.0]
    assert result["0"]["tetra_durations"] == "0-1,5-6"
    assert result["1"]["tetra_durations"] == "1-2"


def test_scheduled_intervals_are_never_deduplicated() -> None:
    agg = ScheduledAggregator()
    for t in (3, 3, 4):
        agg.add(_event(390_000_000, 50.0, 1, t))
    assert agg.finalize()["0"]["tetra_durations"] == "3-4,3-4,4-5"


def test_coalesced_view_leaves_stored_intervals_untouched() -> None:
    agg = ScheduledAggregator(coalesce=True)
    for t in (0, 1, 5):
        agg.add(_event(390_000_000, 50.0, 1, t))
    assert agg.finalize()["0"]["tetra_durations"] == "0-2,5-6"
    det = agg.get(390_000_000)
    assert det is not None
    assert [str(iv) for iv in det.intervals] == ["0-1", "1-2", "5-6"]


def test_coalesce_intervals_merges_overlaps() -> None:
    ivs = [ElapsedInterval(4, 6), ElapsedInterval(0, 1), ElapsedInterval(5, 8), ElapsedInterval(10, 11)]
    assert coalesce_intervals(ivs) == [ElapsedInterval(0, 1), ElapsedInterval(4, 8), ElapsedInterval(10, 11)]
