import threading

import pytest

from gestures.exceptions import CapacityExceeded
from gestures.slot_mapper import ActorSlotMapper


def test_resolve_same_actor_is_stable():
    mapper = ActorSlotMapper(capacity=4)
    first = mapper.resolve(42)
    assert mapper.resolve(42) == first
    assert len(mapper) == 1


def test_slots_assigned_lowest_first():
    mapper = ActorSlotMapper(capacity=3)
    assert [mapper.resolve(a) for a in (500, 10, 77)] == [0, 1, 2]


def test_capacity_boundary():
    mapper = ActorSlotMapper(capacity=2)
    assert mapper.resolve(1001) == 0
    assert mapper.resolve(1002) == 1

    with pytest.raises(CapacityExceeded) as excinfo:
        mapper.resolve(1003)

    assert excinfo.value.actor_id == 1003
    assert excinfo.value.capacity == 2
    # bound slots untouched
    assert mapper.bound_slots() == {0: 1001, 1: 1002}
    assert mapper.is_full


def test_occupied_slot_is_never_handed_out():
    mapper = ActorSlotMapper(capacity=3)
    mapper.resolve(5)
    assert mapper.resolve(42) == 1
    assert mapper.resolve(7) == 2
    assert mapper.resolve(7) != 1


def test_released_slot_is_reused():
    mapper = ActorSlotMapper(capacity=2)
    mapper.resolve(5)
    assert mapper.resolve(42) == 1

    assert mapper.release(42) == 1
    assert 42 not in mapper
    assert mapper.actor_of(1) is None
    assert mapper.resolve(99) == 1


def test_release_unknown_actor_is_noop():
    mapper = ActorSlotMapper(capacity=2)
    mapper.resolve(1)
    assert mapper.release(12345) is None
    assert mapper.bound_slots() == {0: 1}


def test_reappearing_actor_gets_a_fresh_binding():
    mapper = ActorSlotMapper(capacity=2)
    mapper.resolve("a")
    mapper.resolve("b")
    mapper.release("a")
    assert mapper.resolve("c") == 0
    assert mapper.release("b") == 1
    assert mapper.resolve("a") == 1


def test_none_actor_rejected():
    mapper = ActorSlotMapper(capacity=1)
    with pytest.raises(ValueError):
        mapper.resolve(None)


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ActorSlotMapper(capacity=0)


def test_concurrent_resolve_binds_each_actor_once():
    mapper = ActorSlotMapper(capacity=8)
    results = {}

    def worker(actor_id):
        results[actor_id] = mapper.resolve(actor_id)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results.values()) == list(range(8))
    assert mapper.is_full


def test_clear():
    mapper = ActorSlotMapper(capacity=2)
    mapper.resolve(1)
    mapper.clear()
    assert len(mapper) == 0
    assert mapper.resolve(2) == 0
