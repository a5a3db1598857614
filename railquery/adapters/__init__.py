"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to its data and time sources:
- Station directory (CSV file)
- Timetables and live delay boards (TDX-shaped JSON, in memory)
- Clocks (system, fixed)
- Caching systems (in-memory, null)
"""
