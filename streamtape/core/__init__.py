"""Core Application Layer: endpoint services and the CLI command handler.

Connects the domain layer with the infrastructure layer through interfaces.
"""
