"""Pydantic request/response contracts for the API and service layers."""
