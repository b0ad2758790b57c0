from __future__ import annotations

import typing as t

from reporting_client.modules.base import ReportingModule


class SitesManagerModule(ReportingModule):
    name = "SitesManager"

    def get_site_from_id(self, *, id_site: int | str | None = None) -> t.Awaitable[t.Any]:
        return self._call("getSiteFromId", idSite=id_site)

    def get_all_sites_id(self) -> t.Awaitable[list[int]]:
        return self._call("getAllSitesId")

    def get_sites_with_admin_access(
        self,
        *,
        fetch_alias_urls: bool | None = None,
        pattern: str | None = None,
        limit: int | None = None,
    ) -> t.Awaitable[t.Any]:
        return self._call(
            "getSitesWithAdminAccess",
            fetchAliasUrls=fetch_alias_urls,
            pattern=pattern,
            limit=limit,
        )
