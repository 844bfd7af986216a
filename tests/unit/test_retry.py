import httpx
import pytest

from ragops.utils.retry import extract_status, is_retryable, retry_with_backoff


def _status_error(code):
    request = httpx.Request("GET", "https://api.notion.com/v1/pages/x")
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError(f"HTTP {code}", request=request, response=response)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class FlakyCall:
    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def test_status_extraction():
    assert extract_status(_status_error(429)) == 429
    assert extract_status(ValueError("boom")) is None
    assert is_retryable(_status_error(429))
    assert is_retryable(_status_error(503))
    assert not is_retryable(_status_error(404))
    assert not is_retryable(ValueError("boom"))


@pytest.mark.asyncio
async def test_always_failing_call_stops_at_ceiling():
    sleep = RecordingSleep()
    call = FlakyCall([_status_error(500)] * 10)

    with pytest.raises(httpx.HTTPStatusError):
        await retry_with_backoff(call, max_attempts=3, base_delay=1.0, should_retry=is_retryable, sleep=sleep)

    assert call.calls == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_rate_limited_call_recovers():
    sleep = RecordingSleep()
    call = FlakyCall([_status_error(429), _status_error(429)], result={"ok": True})

    result = await retry_with_backoff(call, max_attempts=5, base_delay=0.5, should_retry=is_retryable, sleep=sleep)

    assert result == {"ok": True}
    assert call.calls == 3
    assert sleep.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_non_retryable_error_fails_fast():
    sleep = RecordingSleep()
    call = FlakyCall([_status_error(404)])

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        await retry_with_backoff(call, max_attempts=5, should_retry=is_retryable, sleep=sleep)

    assert excinfo.value.response.status_code == 404
    assert call.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_invalid_attempt_count():
    with pytest.raises(ValueError):
        await retry_with_backoff(FlakyCall([]), max_attempts=0)
