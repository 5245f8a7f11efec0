import pytest

from ssrhttp.errors import ErrorCode, InterceptorError
from ssrhttp.http import InterceptorManager


class TestInterceptorManager:
    """Test cases for the ordered interceptor registry"""

    @pytest.fixture
    def manager(self):
        return InterceptorManager("request")

    def test_use_returns_distinct_handles(self, manager):
        first = manager.use(lambda value: value)
        second = manager.use(lambda value: value)

        assert first != second
        assert len(manager) == 2

    def test_eject_removes_only_that_interceptor(self, manager):
        def keep(value):
            return value

        handle = manager.use(lambda value: value)
        manager.use(keep)

        manager.eject(handle)

        assert list(manager) == [keep]

    def test_eject_unknown_handle_is_ignored(self, manager):
        manager.use(lambda value: value)

        manager.eject(99)

        assert len(manager) == 1

    def test_clear(self, manager):
        manager.use(lambda value: value)

        manager.clear()

        assert len(manager) == 0

    @pytest.mark.asyncio
    async def test_run_pipes_through_sync_and_async_interceptors(self, manager):
        async def double(value):
            return value * 2

        manager.use(lambda value: value + 1)
        manager.use(double)

        assert await manager.run(1) == 4

    @pytest.mark.asyncio
    async def test_run_rejects_none(self, manager):
        def forgetful(value):
            value.append("mutated")

        manager.use(forgetful)

        with pytest.raises(InterceptorError) as exc_info:
            await manager.run([])

        assert exc_info.value.error_code is ErrorCode.INTERCEPTOR_RETURNED_NONE
        assert "forgetful" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_interceptor_ejected_during_run_still_completes_current_pass(self, manager):
        handles = []

        def eject_second(value):
            manager.eject(handles[1])
            return value + ["first"]

        handles.append(manager.use(eject_second))
        handles.append(manager.use(lambda value: value + ["second"]))

        assert await manager.run([]) == ["first", "second"]
        assert await manager.run([]) == ["first"]
