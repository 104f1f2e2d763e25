"""Mutable HTTP response shared by the hooks of one request.

Hooks and the handler all write to the same instance: status, body,
and header lines. ``end()`` marks it finished, which tells the pipeline
to skip the handler while still running every entered ``after_handle``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Response:
    """An HTTP response under construction.

    Header lines are kept as an ordered list of ``(name, value)`` pairs.
    ``add_header`` always appends a new line, so repeated headers such
    as ``Set-Cookie`` are never comma-joined.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    finished: bool = False

    def add_header(self, name: str, value: str) -> Response:
        """Append a header line, keeping any existing lines of that name."""
        self.headers.append((name, value))
        return self

    def set_header(self, name: str, value: str) -> Response:
        """Replace every line named *name* with a single line."""
        lowered = name.lower()
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lowered]
        self.headers.append((name, value))
        return self

    def get_header_list(self, name: str) -> list[str]:
        """Return every value of header *name*, in the order added."""
        lowered = name.lower()
        return [v for n, v in self.headers if n.lower() == lowered]

    def get_header(self, name: str) -> str | None:
        values = self.get_header_list(name)
        return values[0] if values else None

    def end(self, body: str | bytes | None = None) -> None:
        """Mark the response finished, optionally replacing the body."""
        if body is not None:
            self.body = body
        self.finished = True

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
