"""Tests for the change notification bus."""
from zxsgit.constants import ChangeEvent
from zxsgit.services.notifications import ChangeBus


def test_publish_reaches_subscribers_of_that_event_only():
    bus = ChangeBus()
    calls = []
    bus.subscribe(ChangeEvent.USERS, lambda: calls.append("users"))
    bus.subscribe(ChangeEvent.COMPANIES, lambda: calls.append("companies"))

    assert bus.publish(ChangeEvent.USERS) == 1
    assert calls == ["users"]


def test_unsubscribe():
    bus = ChangeBus()
    calls = []
    unsubscribe = bus.subscribe(ChangeEvent.TODOS, lambda: calls.append(1))

    unsubscribe()
    unsubscribe()

    assert bus.publish(ChangeEvent.TODOS) == 0
    assert bus.listener_count(ChangeEvent.TODOS) == 0
    assert calls == []


def test_failing_listener_does_not_stop_delivery():
    bus = ChangeBus()
    calls = []

    def broken():
        raise RuntimeError("view crashed")

    bus.subscribe(ChangeEvent.COMPANIES, broken)
    bus.subscribe(ChangeEvent.COMPANIES, lambda: calls.append(1))

    assert bus.publish(ChangeEvent.COMPANIES) == 2
    assert calls == [1]


def test_listener_may_unsubscribe_while_handling():
    bus = ChangeBus()
    calls = []

    def once():
        calls.append(1)
        unsubscribe()

    unsubscribe = bus.subscribe(ChangeEvent.USERS, once)
    bus.publish(ChangeEvent.USERS)
    bus.publish(ChangeEvent.USERS)

    assert calls == [1]
