"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3002)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Logging (applied by the dev runner and CLI, never on import)
    log_level: str = "info"

    # Composition — seconds a route group may take to finish registering
    registration_timeout: float = 10.0

    # Limits
    max_content_length: int = 1024 * 1024  # 1 MB of JSON is plenty
