"""crmsync: keep paginated customer list views in sync with the Users API."""

__version__ = "0.1.0"
