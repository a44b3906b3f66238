"""Shared building blocks for the Fashion Forecast service."""
