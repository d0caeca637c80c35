"""Unit tests for the retry decorator."""

import pytest
import requests

from jobboard.retry import is_permanent, retry


class FlakyCall:
    def __init__(self, failures, exc):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


def _http_error(status):
    response = requests.Response()
    response.status_code = status
    return requests.HTTPError(f"{status} error", response=response)


def test_retries_until_success():
    call = FlakyCall(2, requests.ConnectionError("reset"))
    assert retry(max_attempts=3)(call)() == "ok"
    assert call.calls == 3


def test_reraises_after_last_attempt():
    call = FlakyCall(5, requests.Timeout("slow"))
    with pytest.raises(requests.Timeout):
        retry(max_attempts=2)(call)()
    assert call.calls == 2


def test_client_errors_are_not_retried():
    call = FlakyCall(5, _http_error(401))
    with pytest.raises(requests.HTTPError):
        retry(max_attempts=3)(call)()
    assert call.calls == 1


def test_rate_limit_and_server_errors_are_retried():
    assert not is_permanent(_http_error(429))
    assert not is_permanent(_http_error(503))
    assert is_permanent(_http_error(404))


def test_non_retryable_errors_propagate_immediately():
    call = FlakyCall(1, ValueError("bad payload"))
    with pytest.raises(ValueError):
        retry(max_attempts=3)(call)()
    assert call.calls == 1
