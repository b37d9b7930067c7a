"""
Tests for DebouncedValidator.
"""

import asyncio

import pytest

from conftest import run_async
from pantry.validation.debounce import DebouncedValidator
from pantry.validation.fields import text

Name = text(1, 20, required_message="Name is required")


class TestDebouncedValidator:
    def test_rapid_calls_validate_latest_once(self):
        async def scenario():
            validator = DebouncedValidator(Name, delay=0.01)
            first = validator("")
            second = validator("a")
            third = validator("Basil")
            assert validator.pending
            return await asyncio.gather(first, second, third), validator.pending

        results, pending = run_async(scenario())

        assert pending is False
        assert all(result.success for result in results)
        assert {result.data for result in results} == {"Basil"}
        # one validation, shared by every caller
        assert results[0] is results[1] is results[2]

    def test_separate_bursts_validate_separately(self):
        async def scenario():
            validator = DebouncedValidator(Name, delay=0.01)
            first = await validator("")
            second = await validator("Thyme")
            return first, second

        first, second = run_async(scenario())
        assert not first.success
        assert second.data == "Thyme"

    def test_cancel_drops_pending_work(self):
        async def scenario():
            validator = DebouncedValidator(Name, delay=0.01)
            future = validator("Sage")
            validator.cancel()
            assert not validator.pending
            with pytest.raises(asyncio.CancelledError):
                await future
            await asyncio.sleep(0.03)
            return future

        future = run_async(scenario())
        assert future.cancelled()

    def test_cancel_when_idle(self):
        validator = DebouncedValidator(Name)
        validator.cancel()
        assert not validator.pending
