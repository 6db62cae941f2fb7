"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Security
    secret_key: str = ""
    token_salt: str = "wren.auth.token"
    token_max_age: int = 3600  # 1 hour

    # Limits
    max_content_length: int = 1024 * 1024  # 1 MB

    # Logging
    log_level: str = "info"

    @classmethod
    def from_env(cls, prefix: str = "WREN_", **overrides: object) -> AppConfig:
        """Build a config from ``{prefix}{FIELD}`` environment variables.

        Explicit keyword *overrides* win over the environment::

            config = AppConfig.from_env(debug=True)  # reads WREN_SECRET_KEY, ...
        """
        values: dict[str, object] = {}
        for f in fields(cls):
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                values[f.name] = raw.lower() in ("true", "1", "yes", "on")
            elif f.type in (int, "int"):
                values[f.name] = int(raw)
            else:
                values[f.name] = raw
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
