"""Enumerations accepted by the Users API query string."""

from enum import Enum


class SortField(str, Enum):
    """Fields the Users API can sort by (sent as ``sortBy``)."""

    FIRST_NAME = "name.first"
    LAST_NAME = "name.last"
    CITY = "location.city"
    COUNTRY = "location.country"
    AGE = "dob.age"
    REGISTERED = "registered.date"


class Span(str, Enum):
    """Registration window filter (sent as ``span``)."""

    WEEK = "week"
    MONTH = "month"
