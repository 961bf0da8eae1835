import asyncio

import pytest

from dashbot.utils.admission import AdmissionGate


def test_try_admit_refuses_beyond_max_pending():
    gate = AdmissionGate(max_concurrent=1, max_pending=2)

    assert gate.try_admit() is True
    assert gate.try_admit() is True
    assert gate.try_admit() is False

    stats = gate.get_stats()
    assert stats["pending"] == 2
    assert stats["rejected"] == 1


def test_release_frees_a_pending_slot():
    gate = AdmissionGate(max_concurrent=1, max_pending=1)
    assert gate.try_admit() is True

    gate.release()

    assert gate.try_admit() is True


def test_unmatched_release_raises():
    with pytest.raises(RuntimeError):
        AdmissionGate(max_concurrent=1).release()


def test_max_pending_never_below_max_concurrent():
    assert AdmissionGate(max_concurrent=4, max_pending=2).max_pending == 4


def test_invalid_max_concurrent():
    with pytest.raises(ValueError):
        AdmissionGate(max_concurrent=0)


@pytest.mark.asyncio
async def test_gate_bounds_concurrent_holders():
    gate = AdmissionGate(max_concurrent=2, max_pending=10)
    running = 0
    peak = 0

    async def work():
        nonlocal running, peak
        async with gate:
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

    await asyncio.gather(*(work() for _ in range(6)))

    assert peak == 2
    assert gate.get_stats()["running"] == 0
