"""Data models for the FastAPI service.

This package contains Pydantic models for stored records, request
validation and the page documents returned by the API.
"""
