"""Configuration for codersdb.

CodersDBConfig holds the database location, engine flags, backup directory
and logging preferences. It can be built directly, from environment
variables (``CODERSDB_*``) or from the ``codersdb`` section of a YAML file:

    codersdb:
      db_path: ./data/db.sqlite
      backup_dir: ./backups
      log_level: DEBUG
"""

import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUTHY = ("true", "1", "yes")


class CodersDBConfig(BaseModel):
    """Settings for a CodersDB instance.

    Attributes:
        db_path: SQLite file path, used when database_url is not set
        database_url: Full SQLAlchemy async URL (overrides db_path)
        echo: Whether SQLAlchemy logs SQL statements
        backup_dir: Directory for backups written without an explicit filename
        log_level: Logging level used by setup_logging
        json_logs: Whether setup_logging renders JSON
    """

    model_config = ConfigDict(extra="forbid")

    db_path: str = Field(default="./db.sqlite", min_length=1)
    database_url: Optional[str] = Field(default=None)
    echo: bool = Field(default=False)
    backup_dir: str = Field(default=".")
    log_level: str = Field(default="WARNING")
    json_logs: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got '{v}'")
        return level

    def resolved_database_url(self) -> str:
        """Return the SQLAlchemy URL for this configuration.

        Returns:
            database_url if set, otherwise an aiosqlite URL for db_path
        """
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.db_path}"

    @classmethod
    def from_env(cls) -> "CodersDBConfig":
        """Load configuration from environment variables.

        Environment variables follow the pattern: CODERSDB_<SETTING_NAME>
        For example: CODERSDB_DB_PATH, CODERSDB_LOG_LEVEL

        Returns:
            CodersDBConfig instance with environment overrides
        """
        return cls(
            db_path=os.getenv("CODERSDB_DB_PATH", cls.model_fields["db_path"].default),
            database_url=os.getenv("CODERSDB_DATABASE_URL") or None,
            echo=os.getenv("CODERSDB_ECHO", str(cls.model_fields["echo"].default)).lower()
            in _TRUTHY,
            backup_dir=os.getenv("CODERSDB_BACKUP_DIR", cls.model_fields["backup_dir"].default),
            log_level=os.getenv("CODERSDB_LOG_LEVEL", cls.model_fields["log_level"].default),
            json_logs=os.getenv(
                "CODERSDB_JSON_LOGS", str(cls.model_fields["json_logs"].default)
            ).lower()
            in _TRUTHY,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "CodersDBConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            CodersDBConfig instance loaded from YAML

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If YAML format is invalid
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {path}: {e}") from e

        # Extract 'codersdb' section if present
        config_data = data.get("codersdb", {}) if isinstance(data, dict) else {}

        return cls(**config_data)
