"""Application configuration.

AppConfig is a frozen dataclass, so it cannot change once the app is built.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True)
    """

    # Include exception text in 500 bodies
    debug: bool = False

    # Body sent when a handler fails and debug is off
    internal_error_body: str = "Internal Server Error"

    # Content type of responses that do not set one
    default_content_type: str = "text/plain; charset=utf-8"
