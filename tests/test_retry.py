import pytest

from infrastructure.retry import retry_transient


class Flaky(Exception):
    pass


def _scripted(outcomes):
    calls = []

    def func():
        calls.append(1)
        item = outcomes[len(calls) - 1]
        if isinstance(item, BaseException):
            raise item
        return item

    return func, calls


def test_returns_first_success_without_sleeping():
    sleeps = []
    func, calls = _scripted(["ok"])

    assert retry_transient(func, retry_on=(Flaky,), sleep=sleeps.append) == "ok"
    assert len(calls) == 1
    assert sleeps == []


def test_retries_once_after_fixed_delay():
    sleeps = []
    func, calls = _scripted([Flaky("busy"), "ok"])

    result = retry_transient(func, retry_on=(Flaky,), delay_s=2.0, sleep=sleeps.append)

    assert result == "ok"
    assert len(calls) == 2
    assert sleeps == [2.0]


def test_reraises_after_last_attempt():
    sleeps = []
    func, calls = _scripted([Flaky("one"), Flaky("two"), "never"])

    with pytest.raises(Flaky, match="two"):
        retry_transient(func, retry_on=(Flaky,), max_attempts=2, sleep=sleeps.append)
    assert len(calls) == 2
    assert sleeps == [2.0]


def test_other_exceptions_propagate_immediately():
    sleeps = []
    func, calls = _scripted([KeyError("boom"), "never"])

    with pytest.raises(KeyError):
        retry_transient(func, retry_on=(Flaky,), sleep=sleeps.append)
    assert len(calls) == 1
    assert sleeps == []


def test_single_attempt_disables_retry():
    func, calls = _scripted([Flaky("busy")])

    with pytest.raises(Flaky):
        retry_transient(func, retry_on=(Flaky,), max_attempts=0, sleep=lambda _s: None)
    assert len(calls) == 1
