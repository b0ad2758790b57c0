"""
The one capability wrapper modules depend on.
"""

import typing as t


@t.runtime_checkable
class Caller(t.Protocol):
    """
    Anything able to run a named remote call.

    ``TransportClient`` runs it eagerly, ``BatchCollector`` queues it until
    the next ``execute``. Wrapper code returns the awaitable untouched so a
    batched call is queued at call time, and callers await the result the
    same way in both cases.
    """

    def invoke(
        self, method: str, params: t.Mapping[str, t.Any] | None = None
    ) -> t.Awaitable[t.Any]: ...
