"""Services layer - Application orchestration.

This module contains the application service that runs the extraction,
resolution and selection stages for one request.

Available services:
- TripQueryService: Main service for answering free-text trip requests
"""

from .trip_query import TripQueryService

__all__ = ["TripQueryService"]
