"""Pydantic schemas for request bodies, normalized fields and responses."""
