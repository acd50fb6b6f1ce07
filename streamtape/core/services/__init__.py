"""Endpoint services: one thin facade per API area."""
