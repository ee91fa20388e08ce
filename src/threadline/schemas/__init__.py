"""Pydantic schemas for the Threadline API."""
