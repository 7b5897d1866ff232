"""Data models for the API.

This package contains Pydantic models for request/response validation.
Documents are stored snake_case; the API speaks camelCase through aliases.
"""
