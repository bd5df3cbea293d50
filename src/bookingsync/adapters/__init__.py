"""Adapters connecting the sync engine to HTTP, iCalendar and SQL."""
