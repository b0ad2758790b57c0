from __future__ import annotations

import typing as t

from reporting_client.modules.base import ReportingModule


class ApiModule(ReportingModule):
    """General API information and report metadata."""

    name = "API"

    def get_matomo_version(self) -> t.Awaitable[str]:
        return self._call("getMatomoVersion")

    def get_php_version(self) -> t.Awaitable[t.Any]:
        return self._call("getPhpVersion")

    def get_ip_from_header(self) -> t.Awaitable[t.Any]:
        return self._call("getIpFromHeader")

    def get_settings(self) -> t.Awaitable[t.Any]:
        return self._call("getSettings")

    def get_report_metadata(
        self,
        *,
        id_site: int | str | None = None,
        period: str | None = None,
        date: t.Any = None,
        hide_metrics_doc: bool | None = None,
        show_subtable_reports: bool | None = None,
        id_sites: t.Sequence[int] | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._call(
            "getReportMetadata",
            idSite=id_site,
            period=period,
            date=date,
            hideMetricsDoc=hide_metrics_doc,
            showSubtableReports=show_subtable_reports,
            idSites=id_sites,
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
        """
        Aggregate metrics of every module for a period.

        Parameters
        ----------
        period : str
            ``day``, ``week``, ``month``, ``year`` or ``range``.
        date : typing.Any
            Date string or ``datetime.date``.
        id_site : int | str | None, optional
            Site to query; the client default applies when omitted.
        segment : str | None, optional
            Segment definition.
        columns : str | typing.Sequence[str] | None, optional
            Restrict the returned metrics.
        """
        return self._call(
            "get", idSite=id_site, period=period, date=date, segment=segment, columns=columns
        )
