"""In-memory stand-in for a femtologging logger."""

from __future__ import annotations


class FakeLogger:
    """Collects ``log`` calls as ``(level, message, exc_info, stack_info)``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message

    def messages(self, level: str | None = None) -> list[str]:
        """Return logged messages, optionally only those at ``level``."""
        return [
            message
            for call_level, message, _, _ in self.calls
            if level is None or call_level == level
        ]
