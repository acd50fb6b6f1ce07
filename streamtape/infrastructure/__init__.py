"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the client to the outside world (HTTP, local files, configuration
sources, the console) by implementing the interfaces defined in the domain layer.
"""
