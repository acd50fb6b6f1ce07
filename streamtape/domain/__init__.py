"""Domain Layer: error taxonomy, value objects, events and interfaces.

Has no dependency on HTTP libraries, the file system or the console.
"""
