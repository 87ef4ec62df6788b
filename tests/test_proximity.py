#!/usr/bin/env python3
"""
Tests for checkpoint proximity alerts and their hysteresis.
"""

import math
import pytest
from hypothesis import given, strategies as st

from stproute.checkpoint import Checkpoint, CheckpointType, STP_CHECKPOINTS, get_checkpoint
from stproute.geometry import EARTH_RADIUS, Position
from stproute.proximity import (
    CheckpointNotification,
    ProximityNotifier,
    ProximityState,
)
from stproute.units import METERS_PER_MILE, DistanceUnit


def north_of(checkpoint: Checkpoint, miles: float) -> Position:
    """Position the given number of miles due north of a checkpoint."""
    dlat = math.degrees(miles * METERS_PER_MILE / EARTH_RADIUS)
    return Position(latitude=checkpoint.latitude + dlat, longitude=checkpoint.longitude)


@pytest.fixture
def spanaway():
    return get_checkpoint("spanaway-middle-school")


@pytest.fixture
def notifier(spanaway):
    return ProximityNotifier([spanaway])


class TestSpanawayApproach:
    """The approach, leave and return scenario at Spanaway Middle School."""

    def test_full_scenario(self, spanaway, notifier):
        assert spanaway.position == Position(47.11504, -122.42719)

        first = notifier.evaluate(north_of(spanaway, 0.9), alerts_enabled=True)
        assert len(first) == 1
        assert first[0].title == "Checkpoint Ahead!"
        assert "Spanaway Middle School" in first[0].body
        assert "0.9 mi" in first[0].body
        assert first[0].identifier == "checkpoint-spanaway-middle-school"
        assert spanaway.id in notifier.state

        # Closer still: no repeat
        assert notifier.evaluate(north_of(spanaway, 0.5), alerts_enabled=True) == []
        assert spanaway.id in notifier.state

        # Far away: re-armed silently
        assert notifier.evaluate(north_of(spanaway, 3.5), alerts_enabled=True) == []
        assert spanaway.id not in notifier.state

        # Back again: alerts again
        again = notifier.evaluate(north_of(spanaway, 0.8), alerts_enabled=True)
        assert len(again) == 1
        assert "0.8 mi" in again[0].body

    def test_body_format(self, spanaway, notifier):
        [notification] = notifier.evaluate(north_of(spanaway, 0.9), alerts_enabled=True)
        assert notification.body == "Spanaway Middle School is 0.9 mi away"
        assert notification.checkpoint_id == spanaway.id
        assert notification.distance_miles == pytest.approx(0.9, abs=1e-6)

    def test_body_in_kilometers(self, spanaway, notifier):
        [notification] = notifier.evaluate(
            north_of(spanaway, 0.5), alerts_enabled=True, unit=DistanceUnit.KILOMETERS
        )
        assert notification.body == "Spanaway Middle School is 0.8 km away"


class TestHysteresis:

    def test_dead_band_keeps_inside(self, spanaway, notifier):
        notifier.evaluate(north_of(spanaway, 0.9), alerts_enabled=True)
        for miles in (1.2, 2.0, 2.99, 0.95, 2.5):
            assert notifier.evaluate(north_of(spanaway, miles), alerts_enabled=True) == []
            assert spanaway.id in notifier.state

    def test_dead_band_keeps_outside(self, spanaway, notifier):
        for miles in (2.9, 1.5, 1.01):
            assert notifier.evaluate(north_of(spanaway, miles), alerts_enabled=True) == []
            assert spanaway.id not in notifier.state

    def test_enter_boundary(self, spanaway, notifier):
        assert notifier.evaluate(north_of(spanaway, 1.001), alerts_enabled=True) == []
        assert len(notifier.evaluate(north_of(spanaway, 0.999), alerts_enabled=True)) == 1

    def test_exit_boundary(self, spanaway, notifier):
        notifier.evaluate(north_of(spanaway, 0.2), alerts_enabled=True)
        notifier.evaluate(north_of(spanaway, 2.999), alerts_enabled=True)
        assert spanaway.id in notifier.state
        notifier.evaluate(north_of(spanaway, 3.001), alerts_enabled=True)
        assert spanaway.id not in notifier.state

    def test_exactly_enter_radius_alerts(self, spanaway, notifier, monkeypatch):
        monkeypatch.setattr(notifier, "distances_to", lambda position: {spanaway.id: 1.0})
        [notification] = notifier.evaluate(spanaway.position, alerts_enabled=True)
        assert notification.body == "Spanaway Middle School is 1.0 mi away"
        assert spanaway.id in notifier.state

    def test_exactly_exit_radius_stays_inside(self, spanaway, notifier, monkeypatch):
        notifier.state.mark_inside(spanaway.id)
        monkeypatch.setattr(notifier, "distances_to", lambda position: {spanaway.id: 3.0})
        assert notifier.evaluate(spanaway.position, alerts_enabled=True) == []
        assert spanaway.id in notifier.state

    @given(st.lists(st.sampled_from([0.1, 0.5, 0.9, 1.5, 2.0, 2.9, 3.1, 3.5, 5.0]), max_size=30))
    def test_matches_two_state_model(self, distances):
        checkpoint = get_checkpoint("spanaway-middle-school")
        notifier = ProximityNotifier([checkpoint])
        inside = False

        for miles in distances:
            emitted = notifier.evaluate(north_of(checkpoint, miles), alerts_enabled=True)
            if not inside and miles <= 1.0:
                assert len(emitted) == 1
                inside = True
            else:
                assert emitted == []
                if inside and miles > 3.0:
                    inside = False
            assert (checkpoint.id in notifier.state) == inside


class TestResetAndDisabled:

    def test_reset_rearms_everything(self, spanaway, notifier):
        notifier.evaluate(north_of(spanaway, 0.5), alerts_enabled=True)
        notifier.reset()
        assert len(notifier.state) == 0

        renotified = notifier.evaluate(north_of(spanaway, 0.5), alerts_enabled=True)
        assert len(renotified) == 1

    def test_disabled_is_a_no_op(self, spanaway, notifier):
        assert notifier.evaluate(north_of(spanaway, 0.1), alerts_enabled=False) == []
        assert len(notifier.state) == 0

    def test_disabled_does_not_rearm(self, spanaway, notifier):
        notifier.evaluate(north_of(spanaway, 0.1), alerts_enabled=True)
        notifier.evaluate(north_of(spanaway, 10.0), alerts_enabled=False)
        assert spanaway.id in notifier.state


class TestMultipleCheckpoints:

    def test_nearby_checkpoints_fire_together(self):
        a = Checkpoint("a", "Stop A", 10, CheckpointType.MINI_STOP, 47.0, -122.0)
        b = Checkpoint("b", "Stop B", 11, CheckpointType.REST_STOP, 47.01, -122.0)
        far = Checkpoint("c", "Stop C", 40, CheckpointType.FINISH, 47.5, -122.0)
        notifier = ProximityNotifier([a, b, far])

        emitted = notifier.evaluate(Position(47.005, -122.0), alerts_enabled=True)

        assert {n.checkpoint_id for n in emitted} == {"a", "b"}
        assert len({n.identifier for n in emitted}) == 2
        assert set(notifier.state) == {"a", "b"}

    def test_official_route_start(self):
        notifier = ProximityNotifier(STP_CHECKPOINTS)
        start = STP_CHECKPOINTS[0]

        emitted = notifier.evaluate(start.position, alerts_enabled=True)

        assert [n.checkpoint_id for n in emitted] == [start.id]
        assert emitted[0].body == "Seattle - UW Stadium is 0.0 mi away"

    def test_distances_to_every_checkpoint(self):
        notifier = ProximityNotifier(STP_CHECKPOINTS)
        distances = notifier.distances_to(STP_CHECKPOINTS[4].position)
        assert len(distances) == len(STP_CHECKPOINTS)
        assert distances["spanaway-middle-school"] == 0.0
        assert distances["portland-holladay-park"] > 100


class TestStateInjection:

    def test_injected_state_is_used(self, spanaway):
        state = ProximityState([spanaway.id])
        notifier = ProximityNotifier([spanaway], state=state)

        assert notifier.evaluate(spanaway.position, alerts_enabled=True) == []
        assert notifier.state is state

    def test_separate_notifiers_do_not_share_state(self, spanaway):
        first = ProximityNotifier([spanaway])
        second = ProximityNotifier([spanaway])

        first.evaluate(spanaway.position, alerts_enabled=True)

        assert len(second.evaluate(spanaway.position, alerts_enabled=True)) == 1

    def test_state_container_behaviour(self):
        state = ProximityState()
        state.mark_inside("b")
        state.mark_inside("a")
        state.mark_outside("missing")
        assert list(state) == ["a", "b"]
        assert "a" in state and len(state) == 2
        state.reset()
        assert len(state) == 0

    @pytest.mark.parametrize("enter, exit_", [(0.0, 3.0), (-1.0, 3.0), (3.0, 3.0), (4.0, 3.0)])
    def test_invalid_radii(self, spanaway, enter, exit_):
        with pytest.raises(ValueError):
            ProximityNotifier([spanaway], enter_radius=enter, exit_radius=exit_)

    def test_custom_radii(self, spanaway):
        notifier = ProximityNotifier([spanaway], enter_radius=0.25, exit_radius=0.5)
        assert notifier.evaluate(north_of(spanaway, 0.3), alerts_enabled=True) == []
        assert len(notifier.evaluate(north_of(spanaway, 0.2), alerts_enabled=True)) == 1
        notifier.evaluate(north_of(spanaway, 0.6), alerts_enabled=True)
        assert spanaway.id not in notifier.state

    def test_notification_is_a_named_tuple(self, spanaway, notifier):
        [notification] = notifier.evaluate(spanaway.position, alerts_enabled=True)
        assert isinstance(notification, CheckpointNotification)
        assert notification._fields[:3] == ("identifier", "title", "body")
