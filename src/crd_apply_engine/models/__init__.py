"""Pydantic models for the CRD apply engine."""
