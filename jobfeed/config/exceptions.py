"""Exceptions raised while loading configuration."""

from typing import List, Optional


class ConfigurationError(Exception):
    """Invalid or missing configuration.

    Carries the individual problems found plus hints for fixing them; the CLI
    prints the formatted message and exits with status 1.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self.describe())

    def describe(self) -> str:
        """Render the message followed by numbered errors and bulleted suggestions."""
        lines = [self.message]
        if self.errors:
            lines.append("\nProblems found:")
            lines.extend(f"  {number}. {error}" for number, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nHow to fix:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
