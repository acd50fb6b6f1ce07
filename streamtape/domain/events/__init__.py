"""Domain events emitted while executing API calls."""
