from reporting_client.modules.api import ApiModule
from reporting_client.modules.base import ReportingModule
from reporting_client.modules.sites_manager import SitesManagerModule
from reporting_client.modules.visits_summary import VisitsSummaryModule

__all__ = [
    "ApiModule",
    "ReportingModule",
    "SitesManagerModule",
    "VisitsSummaryModule",
]
