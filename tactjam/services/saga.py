# tactjam/services/saga.py
"""
Compensating actions for multi-step writes.

The datastore has no multi-row transactions. A Saga records an undo step
after each write that must not outlive a later failure; if the block
raises, the undo steps run newest first and the original error propagates.

    async with Saga("create tacton") as saga:
        row = await store.insert(...)
        saga.on_failure("delete tacton", lambda: store.delete(...))
        await step_that_may_fail()
"""
from typing import Awaitable, Callable, List, Tuple

from tactjam.core.logging import log, log_error
from tactjam.lib.monitoring import record_compensation

Compensation = Callable[[], Awaitable[object]]


class Saga:

    def __init__(self, name: str):
        self.name = name
        self._compensations: List[Tuple[str, Compensation]] = []
        self.compensated: List[str] = []

    def on_failure(self, label: str, action: Compensation) -> None:
        self._compensations.append((label, action))

    async def __aenter__(self) -> "Saga":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            return False

        log("SAGA", f"{self.name} failed ({exc_type.__name__}), running {len(self._compensations)} compensation(s)")
        for label, action in reversed(self._compensations):
            try:
                await action()
                self.compensated.append(label)
                record_compensation(self.name)
            except Exception as compensation_error:
                # keep unwinding; the original error is what the caller sees
                log_error("SAGA", f"Compensation '{label}' failed", compensation_error)
        return False
