"""
Web-analytics models: report request filter, raw report rows, and the
canonical GA metrics bundle.
"""

from pydantic import BaseModel, ConfigDict, Field

from metrics_api.models.common import CamelModel, Count, Number, RawRow, Text


class ReportFilter(BaseModel):
    """
    Structured dimension filter for a report.

    Only string matches on a single dimension are needed by the dashboard
    (e.g. restrict to pages under "/dashboard", or exclude them).
    """

    model_config = ConfigDict(frozen=True)

    field_name: str = "pagePath"
    match_type: str = "BEGINS_WITH"
    value: str
    negate: bool = False

    @classmethod
    def path_prefix(cls, prefix: str, negate: bool = False) -> "ReportFilter":
        return cls(field_name="pagePath", match_type="BEGINS_WITH", value=prefix, negate=negate)

    def to_expression(self) -> dict:
        """Render as an Analytics Data API FilterExpression."""
        expression = {
            "filter": {
                "fieldName": self.field_name,
                "stringFilter": {"matchType": self.match_type, "value": self.value},
            }
        }
        if self.negate:
            return {"notExpression": expression}
        return expression


class RawReportRow(RawRow):
    """One row of a runReport response, values in request order."""

    dimension_values: list[Text] = Field(default_factory=list)
    metric_values: list[Number] = Field(default_factory=list)

    def metric(self, index: int) -> float:
        if index < len(self.metric_values):
            return self.metric_values[index]
        return 0.0

    def dimension(self, index: int) -> str:
        if index < len(self.dimension_values):
            return self.dimension_values[index]
        return ""


# ---------------------------------------------------------------------------
# Canonical bundle
# ---------------------------------------------------------------------------


class KPIs(CamelModel):
    total_users: Count = 0
    new_users: Count = 0
    sessions: Count = 0
    pageviews: Count = 0
    avg_session_duration: Number = 0.0  # seconds
    bounce_rate: Number = 0.0  # 0-1


class DailyVisitors(CamelModel):
    date: str  # YYYY-MM-DD
    active_users: Count = 0
    new_users: Count = 0
    sessions: Count = 0


class TopPage(CamelModel):
    page_path: str
    page_title: str
    pageviews: Count = 0
    users: Count = 0


class ReferrerSource(CamelModel):
    source: str
    medium: str
    sessions: Count = 0
    users: Count = 0


class CountryBreakdown(CamelModel):
    country: str
    country_id: str
    users: Count = 0


class DeviceBreakdown(CamelModel):
    device_category: str
    users: Count = 0


class GAMetricsBundle(CamelModel):
    """Traffic overview for one product (or one filtered slice of it)."""

    kpis: KPIs
    visitors_over_time: list[DailyVisitors]
    top_pages: list[TopPage]
    referrers: list[ReferrerSource]
    countries: list[CountryBreakdown]
    devices: list[DeviceBreakdown]
