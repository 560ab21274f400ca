from gestures.config import EngineConfig
from gestures.lean import LeanDetector
from gestures.types import GestureClass, GestureFrame, PROGRESS_SENTINEL
from utils.action_coordinator import ActionCoordinator

from conftest import obs

PUNCH = GestureClass.PUNCH
KICK = GestureClass.KICK
SPECIAL = GestureClass.SPECIAL_MOVE


def frame(actor_id, *observations):
    return GestureFrame(actor_id=actor_id, observations=tuple(observations))


def test_frame_fires_and_publishes_snapshot(coordinator, sink):
    fired = coordinator.on_frame(frame(42, obs(PUNCH, confidence=0.9)))

    assert fired.gesture == PUNCH
    assert sink.actions == [fired]
    status = sink.last_status()
    assert status.slot == 0
    assert status.is_tracked
    assert status.actor_id == 42
    assert status.latched[PUNCH] is False


def test_snapshot_emitted_even_without_action(coordinator, sink):
    assert coordinator.on_frame(frame(42, obs(PUNCH, detected=False, confidence=0.1))) is None
    assert sink.actions == []
    assert len(sink.statuses) == 1
    assert sink.statuses[0].confidence[PUNCH] == 0.1


def test_held_gesture_fires_once_per_latch(coordinator, sink):
    coordinator.on_frame(frame(42, obs(PUNCH, confidence=0.9)))
    coordinator.on_frame(frame(42, obs(PUNCH, detected=False, confidence=0.2)))
    coordinator.on_frame(frame(42, obs(PUNCH, detected=False, confidence=0.1)))
    assert [a.gesture for a in sink.actions] == [PUNCH]


def test_competing_gestures_resolve_over_ticks(coordinator, sink):
    coordinator.on_frame(frame(7, obs(PUNCH, confidence=0.85), obs(SPECIAL, confidence=0.95)))
    coordinator.on_frame(frame(7))
    # special move beats the less confident punch, punch fires on the next tick
    assert [a.gesture for a in sink.actions] == [SPECIAL, PUNCH]


def test_actors_map_to_separate_slots(coordinator, sink):
    coordinator.on_frame(frame(100, obs(PUNCH, confidence=0.9)))
    coordinator.on_frame(frame(200, obs(KICK, confidence=0.9)))
    coordinator.on_frame(frame(100, obs(KICK, confidence=0.9)))

    assert [(a.slot, a.gesture) for a in sink.actions] == [(0, PUNCH), (1, KICK), (0, KICK)]


def test_capacity_exceeded_drops_frame_and_reports(sink):
    coordinator = ActionCoordinator(sink, config=EngineConfig(max_concurrent_actors=2))
    coordinator.on_frame(frame(1, obs(PUNCH, confidence=0.9)))
    coordinator.on_frame(frame(2))
    sink.clear()

    assert coordinator.on_frame(frame(3, obs(PUNCH, confidence=0.9))) is None

    assert sink.actions == []
    assert sink.statuses == []
    assert len(sink.diagnostics) == 1
    assert sink.diagnostics[0].kind == 'capacity_exceeded'
    assert sink.diagnostics[0].actor_id == 3
    assert coordinator.slot_mapper.bound_slots() == {0: 1, 1: 2}


def test_malformed_observation_reported_frame_continues(coordinator, sink):
    fired = coordinator.on_frame(frame(5, obs("Moonwalk"), obs(PUNCH, confidence=3.0), obs(KICK, confidence=0.7)))

    assert fired.gesture == KICK
    kinds = [d.kind for d in sink.diagnostics]
    assert kinds == ['malformed_observation', 'malformed_observation']
    assert all(d.slot == 0 for d in sink.diagnostics)


def test_tracking_lost_resets_and_publishes(coordinator, sink):
    fired = coordinator.on_frame(
        frame(42, obs(PUNCH, confidence=0.85), obs(SPECIAL, confidence=0.95), obs(KICK, confidence=0.9))
    )
    # punch yields to the more confident special move, which ranks below kick
    assert fired.gesture == KICK
    assert coordinator.status(0).latched[PUNCH]
    assert coordinator.status(0).latched[SPECIAL]

    assert coordinator.on_tracking_lost(42) == 0

    status = sink.last_status()
    assert status.slot == 0
    assert status.is_tracked is False
    assert not any(status.latched.values())
    assert all(p == PROGRESS_SENTINEL for p in status.progress.values())
    assert not coordinator.tracker.is_bound(0)
    assert 42 not in coordinator.slot_mapper


def test_latches_do_not_leak_into_reused_slot(coordinator, sink):
    coordinator.on_frame(frame(42, obs(PUNCH, confidence=0.85), obs(SPECIAL, confidence=0.95)))
    coordinator.on_tracking_lost(42)
    sink.clear()

    assert coordinator.on_frame(frame(99)) is None
    assert sink.last_status().slot == 0
    assert not any(sink.last_status().latched.values())


def test_tracking_lost_for_unknown_actor_is_noop(coordinator, sink):
    assert coordinator.on_tracking_lost(12345) is None
    assert sink.statuses == []


def test_reset_releases_every_actor(coordinator, sink):
    coordinator.on_frame(frame(1))
    coordinator.on_frame(frame(2))
    sink.clear()

    coordinator.reset()

    assert len(coordinator.slot_mapper) == 0
    assert sorted(s.slot for s in sink.statuses) == [0, 1]
    assert all(not s.is_tracked for s in sink.statuses)


def test_lean_detector_output_fires_with_default_config(coordinator, sink):
    detector = LeanDetector(stable_frames=1)
    observations = detector.detect([0.0, 0.0, 2.0], [-0.3, 0.3, 2.05])

    fired = coordinator.on_frame(frame(42, *observations))

    assert fired.gesture == GestureClass.LEAN_LEFT
    assert fired.confidence == 1.0
    assert sink.actions == [fired]
