"""
Integration tests for the full simulation pipeline.

Tests end-to-end flow from initialize() through repeated tick() calls to the
immutable snapshot consumed by renderers.
"""

import pytest
from pydantic import ValidationError

from vitalsync.anomaly.schema import EventSeverity, EventStatus
from vitalsync.core.exceptions import ConfigurationError, EngineStateError
from vitalsync.engine import VitalSignEngine
from vitalsync.signals.randomness import SeededRandomSource


class TestLifecycle:
    """Test initialize/tick ordering rules."""

    def test_initialize_returns_tick_zero_snapshot(self, engine_settings, seeded_rng):
        engine = VitalSignEngine(engine_settings, rng=seeded_rng)
        snapshot = engine.initialize()

        assert snapshot.tick == 0
        assert len(snapshot.signals) == 7
        assert len(snapshot.signals["hr"].history) == 15
        assert len(snapshot.signals["hr"].trend) == 20
        assert snapshot.signals["temp"].trend == ()
        assert snapshot.stats.total == 1
        assert snapshot.stats.critical == 0
        assert snapshot.events[0].status == EventStatus.INFO
        assert "System" in snapshot.events[0].tags
        assert set(snapshot.risks) == {"cardio", "respiratory", "metabolic", "apnea"}

    def test_tick_before_initialize_raises(self, engine_settings, seeded_rng):
        engine = VitalSignEngine(engine_settings, rng=seeded_rng)
        with pytest.raises(EngineStateError):
            engine.tick()
        with pytest.raises(EngineStateError):
            engine.snapshot()

    def test_double_initialize_raises(self, zero_noise_engine):
        with pytest.raises(EngineStateError):
            zero_noise_engine.initialize()

    def test_tick_counter_increments_once_per_call(self, zero_noise_engine):
        for expected in range(1, 6):
            assert zero_noise_engine.tick().tick == expected
        assert zero_noise_engine.tick_count == 5

    def test_unknown_signal_in_wiring_raises(self, engine_settings):
        broken = engine_settings.model_copy(update={"correlation_signals": ["hr", "ecg"]})
        with pytest.raises(ConfigurationError):
            VitalSignEngine(broken, rng=SeededRandomSource(1))


class TestInvariants:
    """Test properties that must hold after every tick."""

    @pytest.mark.slow
    def test_bounds_matrix_and_risk_ranges(self, engine_settings):
        engine = VitalSignEngine(engine_settings, rng=SeededRandomSource(2024))
        engine.initialize()

        for _ in range(300):
            snapshot = engine.tick()

            for signal in snapshot.signals.values():
                assert signal.min <= signal.value <= signal.max
                assert len(signal.history) <= engine_settings.chart_capacity
                assert len(signal.trend) <= engine_settings.trend_capacity

            matrix = snapshot.correlations
            for a in matrix.signals:
                assert matrix.get(a, a) == 1.0
                for b in matrix.signals:
                    assert -1.0 <= matrix.get(a, b) <= 1.0

            for risk in snapshot.risks.values():
                assert 0 <= risk.value <= 100
                assert 0 <= risk.target <= 100

            assert len(snapshot.events) <= 15
            assert snapshot.stats.total == len(snapshot.events)

    def test_quiet_engine_holds_baseline_and_risks_decay_to_floor(self, quiet_settings, zero_noise_rng):
        engine = VitalSignEngine(quiet_settings, rng=zero_noise_rng)
        engine.initialize()

        for _ in range(20):
            snapshot = engine.tick()

        for signal in snapshot.signals.values():
            assert signal.value == signal.baseline

        # One smoothing step at initialize plus one per tick toward the floor
        cardio = snapshot.risks["cardio"]
        assert cardio.target == 3
        assert cardio.value == pytest.approx(3 + (12 - 3) * 0.9**21)

    def test_snapshots_are_immutable_and_detached(self, zero_noise_engine):
        first = zero_noise_engine.tick()
        history = first.signals["hr"].history

        zero_noise_engine.tick()

        assert first.signals["hr"].history == history
        with pytest.raises(ValidationError):
            first.tick = 99

    def test_writing_into_snapshot_matrix_leaves_engine_untouched(self, engine_settings, seeded_rng):
        engine = VitalSignEngine(engine_settings, rng=seeded_rng)
        snapshot = engine.initialize()
        expected = engine.correlations.get("hr", "spo2")

        snapshot.correlations.values["hr"]["spo2"] = 42.0

        assert engine.snapshot().correlations.get("hr", "spo2") == expected
        assert engine.tick().correlations.get("hr", "hr") == 1.0


class TestAnomalyEpisodes:
    """Test scheduled multi-signal anomaly episodes end to end."""

    def test_activation_at_tick_30(self, zero_noise_engine):
        for _ in range(29):
            snapshot = zero_noise_engine.tick()
        assert not snapshot.anomaly.state.active

        snapshot = zero_noise_engine.tick()

        assert snapshot.tick == 30
        assert zero_noise_engine.anomaly_state.active
        assert snapshot.anomaly.state.start_tick == 30
        latest = snapshot.events[0]
        assert latest.status == EventStatus.ACTIVE
        assert latest.severity == EventSeverity.MEDIUM
        assert {"HR↔SpO2", "HRV Decline"} <= set(latest.tags)
        assert snapshot.stats.critical == 1

    def test_drift_moves_signals_during_episode(self, zero_noise_engine):
        before = zero_noise_engine.run(29)
        during = zero_noise_engine.run(15)

        assert during.anomaly.severity == pytest.approx(14 / 15)
        assert during.signals["hr"].value > before.signals["hr"].value
        assert during.signals["spo2"].value < before.signals["spo2"].value
        assert during.signals["hrv"].value < before.signals["hrv"].value
        assert during.signals["rr"].value > before.signals["rr"].value

    def test_auto_resolution_at_t_plus_21(self, zero_noise_engine):
        zero_noise_engine.run(50)
        assert zero_noise_engine.anomaly_state.active

        snapshot = zero_noise_engine.tick()

        assert snapshot.tick == 51
        assert not snapshot.anomaly.state.active
        assert snapshot.events[0].status == EventStatus.AUTO_RESOLVED
        assert snapshot.events[0].severity == EventSeverity.LOW
        assert [e.status for e in snapshot.events].count(EventStatus.AUTO_RESOLVED) == 1
        assert snapshot.anomaly.state.next_trigger_tick == 51 + 25 + 19
        assert snapshot.stats.total == 3
        assert snapshot.stats.resolved == 1

    @pytest.mark.slow
    def test_event_log_stays_bounded_over_long_run(self, engine_settings):
        engine = VitalSignEngine(engine_settings, rng=SeededRandomSource(5))
        snapshot = engine.run(2000)

        assert snapshot.stats.total == 15
        assert len(snapshot.events) == 15
        ids = [e.event_id for e in snapshot.events]
        assert ids == sorted(ids, reverse=True)
        assert all(e.status != EventStatus.INFO for e in snapshot.events)


def test_independent_engines_share_no_state(engine_settings):
    a = VitalSignEngine(engine_settings, rng=SeededRandomSource(11))
    b = VitalSignEngine(engine_settings, rng=SeededRandomSource(11))
    a.initialize()
    b.initialize()

    for _ in range(40):
        snap_a = a.tick()
    assert b.tick_count == 0

    for _ in range(40):
        snap_b = b.tick()

    assert snap_a.signals["hr"].history == snap_b.signals["hr"].history
    assert snap_a.correlations == snap_b.correlations
