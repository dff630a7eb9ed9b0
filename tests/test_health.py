import pytest

from social.graze.hdlproxy.model.health import HealthGauge


@pytest.mark.asyncio
async def test_health_gauge_threshold():
    health_gauge = HealthGauge(health_threshold=2)
    assert await health_gauge.is_healthy() is True

    assert await health_gauge.record_failure() == 1
    assert await health_gauge.record_failure(2) == 3
    assert await health_gauge.is_healthy() is False

    await health_gauge.tick()
    assert await health_gauge.is_healthy() is True


@pytest.mark.asyncio
async def test_health_gauge_tick_floor():
    health_gauge = HealthGauge()
    await health_gauge.tick()
    assert await health_gauge.record_failure() == 1
