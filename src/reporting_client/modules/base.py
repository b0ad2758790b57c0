from __future__ import annotations

import typing as t

from reporting_client.caller import Caller


class ReportingModule:
    """
    Thin wrapper binding one remote module to a :class:`Caller`.

    Subclasses only rename and forward arguments; encoding, defaults and
    error handling live in the caller.
    """

    name: str = ""

    def __init__(self, caller: Caller) -> None:
        self._caller = caller

    @property
    def caller(self) -> Caller:
        return self._caller

    def _call(self, action: str, **params: t.Any) -> t.Awaitable[t.Any]:
        return self._caller.invoke(f"{self.name}.{action}", params)
