import asyncio


class HealthGauge:
    """
    A makeshift health check driven by remote resolution failures.

    Every resolution that fails because a remote repository could not be queried bumps the counter.
    The counter decays by one on each tick of the background health task. A burst of failures
    pushes the counter over the threshold and the readiness probe reports the service as unhealthy
    until enough ticks have passed.

    Handles that simply do not exist are not failures and never touch the gauge.
    """

    def __init__(self, value: int = 0, health_threshold: int = 100) -> None:
        self._value = value
        self._health_threshold = health_threshold
        self._lock = asyncio.Lock()

    async def record_failure(self, count: int = 1) -> int:
        async with self._lock:
            self._value += int(count)
            return self._value

    async def tick(self) -> None:
        async with self._lock:
            if self._value > 0:
                self._value -= 1

    async def is_healthy(self) -> bool:
        async with self._lock:
            return self._value <= self._health_threshold
