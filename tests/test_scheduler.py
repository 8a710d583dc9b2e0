import pytest

from distkit.message import new_join, new_request, new_result
from distkit.scheduler import CHUNK_SIZE, Scheduler

CLIENT = 10
OTHER_CLIENT = 11


def test_join_without_work_sends_nothing():
    sched = Scheduler()
    assert sched.handle_message(1, new_join()) == []


def test_small_request_goes_to_free_miner():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    out = sched.handle_message(CLIENT, new_request("msg", 0, 100))
    assert out == [(1, new_request("msg", 0, 100))]


def test_request_waits_for_miner():
    sched = Scheduler()
    assert sched.handle_message(CLIENT, new_request("msg", 0, 100)) == []
    assert sched.handle_message(1, new_join()) == [(1, new_request("msg", 0, 100))]


def test_result_forwarded_to_client():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(CLIENT, new_request("msg", 0, 100))
    out = sched.handle_message(1, new_result(5, 7))
    assert out == [(CLIENT, new_result(5, 7))]


def test_large_request_split_between_free_miners():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(2, new_join())
    out = sched.handle_message(CLIENT, new_request("msg", 0, 15000))
    assert out == [
        (1, new_request("msg", 0, CHUNK_SIZE)),
        (2, new_request("msg", CHUNK_SIZE, 15000)),
    ]


@pytest.mark.parametrize("first,second", [((50, 3), (20, 12000)), ((20, 12000), (50, 3))])
def test_client_gets_smallest_hash(first, second):
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(2, new_join())
    sched.handle_message(CLIENT, new_request("msg", 0, 15000))
    assert sched.handle_message(1, new_result(*first)) == []
    out = sched.handle_message(2, new_result(*second))
    best = min(first, second)
    assert out == [(CLIENT, new_result(*best))]


def test_remainder_of_large_request_is_queued():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    out = sched.handle_message(CLIENT, new_request("msg", 0, 15000))
    assert out == [(1, new_request("msg", 0, CHUNK_SIZE))]
    out = sched.handle_message(1, new_result(40, 4))
    assert out == [(1, new_request("msg", CHUNK_SIZE, 15000))]
    out = sched.handle_message(1, new_result(30, 11000))
    assert out == [(CLIENT, new_result(30, 11000))]


def test_join_takes_one_chunk_of_queued_request():
    sched = Scheduler()
    sched.handle_message(CLIENT, new_request("msg", 0, 15000))
    assert sched.handle_message(1, new_join()) == [(1, new_request("msg", 0, CHUNK_SIZE))]
    assert sched.handle_message(2, new_join()) == [(2, new_request("msg", CHUNK_SIZE, 15000))]
    assert sched.handle_message(3, new_join()) == []


def test_working_miner_lost_work_goes_to_free_miner():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(2, new_join())
    sched.handle_message(CLIENT, new_request("msg", 0, 100))
    assert sched.handle_disconnect(1) == [(2, new_request("msg", 0, 100))]
    assert sched.handle_message(2, new_result(9, 8)) == [(CLIENT, new_result(9, 8))]


def test_working_miner_lost_work_requeued_at_front():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(CLIENT, new_request("msg", 0, 100))
    sched.handle_message(OTHER_CLIENT, new_request("other", 0, 50))
    assert sched.handle_disconnect(1) == []
    assert sched.handle_message(2, new_join()) == [(2, new_request("msg", 0, 100))]
    assert sched.handle_message(3, new_join()) == [(3, new_request("other", 0, 50))]


def test_free_miner_disconnect_removes_it():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    assert sched.handle_disconnect(1) == []
    assert sched.handle_message(CLIENT, new_request("msg", 0, 100)) == []


def test_pending_client_disconnect_drops_request():
    sched = Scheduler()
    sched.handle_message(CLIENT, new_request("msg", 0, 100))
    assert sched.handle_disconnect(CLIENT) == []
    assert sched.handle_message(1, new_join()) == []


def test_assigned_client_disconnect_discards_result():
    sched = Scheduler()
    sched.handle_message(1, new_join())
    sched.handle_message(CLIENT, new_request("msg", 0, 100))
    assert sched.handle_disconnect(CLIENT) == []
    assert sched.handle_message(1, new_result(5, 7)) == []
    out = sched.handle_message(OTHER_CLIENT, new_request("other", 0, 50))
    assert out == [(1, new_request("other", 0, 50))]


def test_unknown_disconnect_is_ignored():
    sched = Scheduler()
    assert sched.handle_disconnect(42) == []


def test_queued_requests_served_in_order():
    sched = Scheduler()
    sched.handle_message(CLIENT, new_request("a", 0, 10))
    sched.handle_message(OTHER_CLIENT, new_request("b", 0, 20))
    sched.handle_message(1, new_join())
    out = sched.handle_message(1, new_result(3, 2))
    assert out == [(1, new_request("b", 0, 20)), (CLIENT, new_result(3, 2))]
    out = sched.handle_message(1, new_result(6, 1))
    assert out == [(OTHER_CLIENT, new_result(6, 1))]