import threading
from unittest.mock import Mock, patch

import pytest

from gatekit.networking.cancel import CancelToken, Deadline
from gatekit.networking.errors import RequestCancelledError, RequestTimeoutError


def test_token_starts_untriggered():
    token = CancelToken()

    assert not token.cancelled
    assert token.reason is None
    token.raise_if_cancelled()


def test_cancel_records_default_reason():
    token = CancelToken()

    assert token.cancel() is True
    assert isinstance(token.reason, RequestCancelledError)
    with pytest.raises(RequestCancelledError):
        token.raise_if_cancelled()


def test_cancel_is_idempotent():
    token = CancelToken()
    first = ValueError("first")

    token.cancel(first)

    assert token.cancel(ValueError("second")) is False
    assert token.reason is first


def test_subscribers_run_once_on_cancel():
    token = CancelToken()
    callback = Mock()
    token.subscribe(callback)

    token.cancel()
    token.cancel()

    callback.assert_called_once_with()


def test_unsubscribed_callback_does_not_run():
    token = CancelToken()
    callback = Mock()
    unsubscribe = token.subscribe(callback)

    unsubscribe()
    token.cancel()

    callback.assert_not_called()


def test_subscribe_after_cancel_runs_immediately():
    token = CancelToken()
    token.cancel()
    callback = Mock()

    token.subscribe(callback)

    callback.assert_called_once_with()


def test_deadline_without_timeout_arms_nothing():
    token = CancelToken()

    with Deadline(token, None) as deadline:
        assert not deadline.armed

    assert not token.cancelled


def test_deadline_fires_timeout_reason():
    token = CancelToken()

    with Deadline(token, 0.01):
        assert token.wait(2)

    assert token.timed_out
    assert isinstance(token.reason, RequestTimeoutError)
    assert token.reason.timeout == 0.01


def test_deadline_clears_timer_on_exit():
    token = CancelToken()

    with patch("gatekit.networking.cancel.threading.Timer") as mock_timer:
        with Deadline(token, 5.0) as deadline:
            assert deadline.armed
        assert not deadline.armed

    mock_timer.return_value.start.assert_called_once()
    mock_timer.return_value.cancel.assert_called_once()


def test_deadline_clears_timer_on_error():
    token = CancelToken()

    with patch("gatekit.networking.cancel.threading.Timer") as mock_timer:
        with pytest.raises(KeyError):
            with Deadline(token, 5.0):
                raise KeyError("boom")

    mock_timer.return_value.cancel.assert_called_once()


def test_cleared_deadline_never_fires():
    token = CancelToken()

    with Deadline(token, 0.05):
        pass

    assert not token.wait(0.2)


def test_cancel_from_another_thread_wakes_waiter():
    token = CancelToken()
    threading.Timer(0.01, token.cancel).start()

    assert token.wait(2)


def test_cleared_deadline_ignores_a_late_fire():
    token = CancelToken()

    with patch("gatekit.networking.cancel.threading.Timer") as mock_timer:
        with Deadline(token, 5.0) as deadline:
            deadline.clear()
            mock_timer.call_args.args[1]()

    assert not token.cancelled
    mock_timer.return_value.cancel.assert_called_once()
