"""Pydantic schemas for documents and pipeline configuration."""
