"""Runtime settings — env-driven via pydantic-settings.

Reads from a .env file and CDREXPORT_* environment variables.  The INI
column configuration itself is a separate file, located by
``config_path``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProdConfig(BaseSettings):
    """Process settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CDREXPORT_CONFIG_PATH=/etc/asterisk/cdr_realtime.conf
        export CDREXPORT_LOG_LEVEL=DEBUG
        export CDREXPORT_SUBSTITUTION_BUFFER_SIZE=4096
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CDREXPORT_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Column configuration source
    config_path: Path = Path("cdr_realtime.conf")
    default_engine: str = "CDR"

    # Template substitution output buffer, terminator included
    substitution_buffer_size: int = Field(default=1024, ge=2)

    # Root directory for the bundled local_file and sqlite engines
    engine_data_path: Path = Path(".cdrexport/engines")

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton — import as `from cdrexport.config import config`
config = ProdConfig()
