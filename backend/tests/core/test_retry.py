import pytest
from sqlalchemy.exc import OperationalError

from screenprint.core.retry import retry_async


class Flaky:
    """Échoue `failures` fois avant de réussir."""

    def __init__(self, failures: int, error: Exception):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.asyncio
async def test_retry_succeeds_after_transient_errors():
    operation = Flaky(2, OperationalError("SELECT 1", {}, Exception("connection reset")))
    result = await retry_async(operation, attempts=3, delay=0)
    assert result == "ok"
    assert operation.calls == 3


@pytest.mark.asyncio
async def test_retry_gives_up_after_max_attempts():
    operation = Flaky(5, ConnectionError("down"))
    with pytest.raises(ConnectionError):
        await retry_async(operation, attempts=3, delay=0)
    assert operation.calls == 3


@pytest.mark.asyncio
async def test_non_transient_error_is_not_retried():
    operation = Flaky(1, ValueError("bad input"))
    with pytest.raises(ValueError):
        await retry_async(operation, attempts=3, delay=0)
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_custom_retry_on():
    operation = Flaky(1, KeyError("missing"))
    assert await retry_async(operation, attempts=2, delay=0, retry_on=(KeyError,)) == "ok"


@pytest.mark.asyncio
async def test_attempts_must_be_positive():
    with pytest.raises(ValueError):
        await retry_async(Flaky(0, ValueError()), attempts=0)
