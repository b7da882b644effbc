"""
Output helpers for callers of the engine.

Modules
-------
chart_utils  Price formatting, date-range filtering, history parsing, CSV export.
formatters   ASCII forecast summary for the CLI.
"""
