"""Value objects, configuration and wire models of the StreamTape API."""
