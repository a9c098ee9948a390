"""Pydantic models of the blog API."""
