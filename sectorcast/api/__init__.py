"""
FastAPI backend for the sector demand forecasting service.

This package contains the REST API layer: schemas (Pydantic DTOs),
routes, middleware, dependency wiring and error handling.
"""
