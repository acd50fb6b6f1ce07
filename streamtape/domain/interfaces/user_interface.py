"""Interface for interacting with the user (output only).

Defines the contract for displaying results, errors, warnings and upload
progress, allowing different UI implementations.
"""

import abc
from typing import Any, Dict, List, Sequence


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The text to display.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_record(self, title: str, record: Dict[str, Any]) -> None:
        """Displays one key/value record (e.g., account info)."""
        pass

    @abc.abstractmethod
    def display_table(self, title: str, columns: Sequence[str], rows: List[Sequence[Any]]) -> None:
        """Displays rows of values under the given column headers."""
        pass

    def start_progress(self, description: str) -> None:
        """Starts a progress indicator (optional)."""
        pass

    def update_progress(self, fraction: float) -> None:
        """Updates the running progress indicator with a 0.0..1.0 fraction (optional)."""
        pass

    def stop_progress(self) -> None:
        """Stops the running progress indicator (optional)."""
        pass
