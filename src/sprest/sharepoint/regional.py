"""Regional settings and time zones of a web."""

from __future__ import annotations

from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance


class RegionalSettings(QueryableInstance[str]):
    default_path = "regionalsettings"

    @property
    def installed_languages(self) -> QueryableCollection[str]:
        return QueryableCollection(self, "installedlanguages")

    @property
    def time_zone(self) -> TimeZone:
        """The time zone the web is configured with."""
        return TimeZone(self, "timezone")

    @property
    def time_zones(self) -> TimeZones:
        """Every time zone the server knows about."""
        return TimeZones(self)


class TimeZones(QueryableCollection[str]):
    default_path = "timezones"

    def get_by_id(self, zone_id: int) -> TimeZone:
        return TimeZone(self, f"GetById({zone_id})")


class TimeZone(QueryableInstance[str]):
    pass
