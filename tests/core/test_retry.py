"""Tests for retry policies and call state tracking."""

import pytest

from dyncall.core.retry import CallAttempt, CallState, NoRetry, TieredBackoff


class TestTieredBackoff:
    def test_default_configuration(self):
        strategy = TieredBackoff()
        assert strategy.short_delay == 0.2
        assert strategy.long_delay == 0.5
        assert strategy.short_delay_errors == 2

    def test_delays(self):
        strategy = TieredBackoff()
        assert [strategy.next_delay(n) for n in (0, 1, 2, 3, 4)] == [0.0, 0.2, 0.2, 0.5, 0.5]

    def test_should_retry_depends_on_budget(self):
        strategy = TieredBackoff()
        assert strategy.should_retry(1, remaining=1) is True
        assert strategy.should_retry(1, remaining=0) is False

    def test_from_settings(self, monkeypatch):
        from dyncall.core.settings import clear_settings_cache

        monkeypatch.setenv("DYNCALL_RETRY_SHORT_DELAY", "0.05")
        monkeypatch.setenv("DYNCALL_RETRY_LONG_DELAY", "1.5")
        clear_settings_cache()
        strategy = TieredBackoff.from_settings()
        assert strategy.short_delay == 0.05
        assert strategy.long_delay == 1.5


class TestNoRetry:
    def test_never_retries(self):
        strategy = NoRetry()
        assert strategy.should_retry(0, remaining=5) is False
        assert strategy.next_delay(1) == 0.0


class TestCallState:
    def test_terminal_states(self):
        assert CallState.SUCCEEDED.is_terminal
        assert CallState.FAILED_TERMINAL.is_terminal
        assert not CallState.RETRYING.is_terminal


class TestCallAttempt:
    def test_success_path(self):
        attempt = CallAttempt(strategy=TieredBackoff(), max_retries=3)
        assert attempt.state is CallState.NOT_STARTED
        attempt.start_sending()
        attempt.succeed()
        assert attempt.state is CallState.SUCCEEDED
        assert attempt.attempts == 1

    def test_retry_budget(self):
        attempt = CallAttempt(strategy=TieredBackoff(), max_retries=2)
        for expected_remaining in (1, 0):
            attempt.start_sending()
            assert attempt.can_retry()
            attempt.record_failure(ConnectionError())
            assert attempt.remaining == expected_remaining
        attempt.start_sending()
        assert not attempt.can_retry()
        attempt.fail()
        assert attempt.state is CallState.FAILED_TERMINAL
        assert attempt.attempts == 3
        assert len(attempt.errors) == 2

    def test_next_delay_uses_recorded_errors(self):
        attempt = CallAttempt(strategy=TieredBackoff(), max_retries=5)
        delays = []
        for _ in range(4):
            attempt.start_sending()
            attempt.record_failure(ConnectionError())
            delays.append(attempt.next_delay())
        assert delays == [0.2, 0.2, 0.5, 0.5]

    def test_no_retry_strategy(self):
        attempt = CallAttempt(strategy=NoRetry(), max_retries=3)
        attempt.start_sending()
        assert not attempt.can_retry()

    def test_invalid_transition(self):
        attempt = CallAttempt(strategy=NoRetry())
        with pytest.raises(RuntimeError, match="Invalid call state transition"):
            attempt.succeed()

    def test_terminal_state_is_final(self):
        attempt = CallAttempt(strategy=NoRetry())
        attempt.start_sending()
        attempt.fail()
        with pytest.raises(RuntimeError):
            attempt.start_sending()

    def test_last_error(self):
        attempt = CallAttempt(strategy=TieredBackoff(), max_retries=1)
        assert attempt.last_error is None
        error = TimeoutError()
        attempt.start_sending()
        attempt.record_failure(error)
        assert attempt.last_error is error
