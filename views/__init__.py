# views/__init__.py
"""Read-only projections of a board for the calendar, table, Gantt and dashboard views."""
