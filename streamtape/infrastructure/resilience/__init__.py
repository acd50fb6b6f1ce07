"""API Resilience Implementations.

Contains the request layer that retries API calls with exponential
backoff and classifies failures into typed errors.
"""
