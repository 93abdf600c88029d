from hrms.users.throttle import LoginThrottle


def test_locks_after_max_attempts_and_reports_wait(clock):
    throttle = LoginThrottle(max_attempts=3, decay_minutes=15, clock=clock)

    for _ in range(3):
        assert not throttle.too_many_attempts("k")
        throttle.hit("k")

    assert throttle.too_many_attempts("k")
    assert throttle.available_in("k") == 15 * 60

    clock.advance(minutes=5, seconds=30)
    assert throttle.available_in("k") == 570


def test_window_expires(clock):
    throttle = LoginThrottle(max_attempts=1, decay_minutes=1, clock=clock)
    throttle.hit("k")
    assert throttle.too_many_attempts("k")

    clock.advance(minutes=1)
    assert not throttle.too_many_attempts("k")
    assert throttle.available_in("k") == 0


def test_keys_are_independent_and_clear_resets(clock):
    throttle = LoginThrottle(max_attempts=1, decay_minutes=1, clock=clock)
    throttle.hit("a")
    assert not throttle.too_many_attempts("b")

    throttle.clear("a")
    assert not throttle.too_many_attempts("a")
