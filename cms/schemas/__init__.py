"""Pydantic request validators."""
