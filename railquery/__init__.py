"""Top-level package for railquery.

Turns free-form, mixed-script (Traditional Chinese / English) rail trip
requests into ranked train departures in three rule-based stages:
intent extraction, station resolution and departure selection.
"""

__version__ = "0.1.0"
