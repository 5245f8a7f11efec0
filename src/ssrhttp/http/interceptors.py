"""Ordered interceptor registries for request configs and responses."""

import inspect
from collections.abc import Callable, Iterator
from typing import Any

from ..errors import InterceptorError

Interceptor = Callable[[Any], Any]


class InterceptorManager:
    """Registry of transforms applied in registration order"""

    def __init__(self, name: str):
        self.name = name
        self._handlers: dict[int, Interceptor] = {}
        self._next_id = 0

    def use(self, fn: Interceptor) -> int:
        """Register an interceptor and return a handle for eject()"""
        handle = self._next_id
        self._handlers[handle] = fn
        self._next_id += 1
        return handle

    def eject(self, handle: int) -> None:
        """Remove a previously registered interceptor; unknown handles are ignored"""
        self._handlers.pop(handle, None)

    def clear(self) -> None:
        self._handlers.clear()

    def __iter__(self) -> Iterator[Interceptor]:
        # dicts keep insertion order, so this is registration order
        return iter(list(self._handlers.values()))

    def __len__(self) -> int:
        return len(self._handlers)

    async def run(self, value: Any) -> Any:
        """Pipe a value through every interceptor, awaiting async ones"""
        for fn in self:
            result = fn(value)
            if inspect.isawaitable(result):
                result = await result
            if result is None:
                raise InterceptorError(
                    f"{self.name} interceptor {getattr(fn, '__name__', repr(fn))} returned None",
                    details={"registry": self.name},
                )
            value = result
        return value


class Interceptors:
    """The request and response registries owned by one client instance"""

    def __init__(self):
        self.request = InterceptorManager("request")
        self.response = InterceptorManager("response")
