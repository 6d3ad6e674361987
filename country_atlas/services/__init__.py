"""Aggregation pipeline, session lifecycle and shared HTTP client."""
