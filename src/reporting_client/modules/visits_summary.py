from __future__ import annotations

import typing as t

from reporting_client.modules.base import ReportingModule


class VisitsSummaryModule(ReportingModule):
    """
    Core web analytics metrics: visits, unique visitors, actions, bounces.

    Every method takes ``period`` and ``date`` plus an optional site and
    segment; ``id_site`` falls back to the client default.
    """

    name = "VisitsSummary"

    def _metric(
        self,
        action: str,
        *,
        period: str,
        date: t.Any,
        id_site: int | str | None,
        segment: str | None,
        **extra: t.Any,
    ) -> t.Awaitable[t.Any]:
        return self._call(
            action, idSite=id_site, period=period, date=date, segment=segment, **extra
        )

    def get(
        self,
        *,
        period: str,
        date: t.Any,
        id_site: int | str | None = None,
        segment: str | None = None,
        columns: str | t.Sequence[str] | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._metric(
            "get", period=period, date=date, id_site=id_site, segment=segment, columns=columns
        )

    def get_visits(
        self,
        *,
        period: str,
        date: t.Any,
        id_site: int | str | None = None,
        segment: str | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._metric(
            "getVisits", period=period, date=date, id_site=id_site, segment=segment
        )

    def get_unique_visitors(
        self,
        *,
        period: str,
        date: t.Any,
        id_site: int | str | None = None,
        segment: str | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._metric(
            "getUniqueVisitors", period=period, date=date, id_site=id_site, segment=segment
        )

    def get_actions(
        self,
        *,
        period: str,
        date: t.Any,
        id_site: int | str | None = None,
        segment: str | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._metric(
            "getActions", period=period, date=date, id_site=id_site, segment=segment
        )
