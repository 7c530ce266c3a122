import pytest
from unittest.mock import AsyncMock

from tactjam.services.saga import Saga


@pytest.mark.asyncio
async def test_success_runs_no_compensation():
    undo = AsyncMock()
    async with Saga("demo") as saga:
        saga.on_failure("undo", undo)

    undo.assert_not_awaited()
    assert saga.compensated == []


@pytest.mark.asyncio
async def test_failure_compensates_in_reverse_and_reraises():
    calls = []

    async def step(label):
        calls.append(label)

    with pytest.raises(RuntimeError, match="boom"):
        async with Saga("demo") as saga:
            saga.on_failure("first", lambda: step("first"))
            saga.on_failure("second", lambda: step("second"))
            raise RuntimeError("boom")

    assert calls == ["second", "first"]
    assert saga.compensated == ["second", "first"]


@pytest.mark.asyncio
async def test_failing_compensation_does_not_mask_error():
    later = AsyncMock()

    with pytest.raises(ValueError):
        async with Saga("demo") as saga:
            saga.on_failure("later", later)
            saga.on_failure("broken", AsyncMock(side_effect=RuntimeError("undo failed")))
            raise ValueError("original")

    later.assert_awaited_once()
    assert saga.compensated == ["later"]
