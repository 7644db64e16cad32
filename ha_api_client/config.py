"""Configuration management for the Home Assistant API client."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import HAConfigurationError
from .timestamps import DEFAULT_FRACTION_DIGITS, SUPPORTED_FRACTION_DIGITS


class HAClientConfig(BaseSettings):
    """
    Configuration model for the Home Assistant client.

    Values come from keyword arguments, ``HA_*`` environment variables or a
    ``.env`` file, in that order of precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix='HA_',
        env_file='.env',
        extra='ignore',
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    base_url: str = Field(..., description="Home Assistant base URL")
    access_token: str = Field(..., description="Home Assistant long-lived access token")
    timeout: float = Field(default=10.0, ge=1.0, le=300.0, description="Transport timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timestamp_fraction_digits: int = Field(
        default=DEFAULT_FRACTION_DIGITS, description="Fractional-second digits in API timestamps"
    )
    serialize_requests: bool = Field(
        default=True,
        description="Hold the shared lock for GETs and the exclusive lock for POSTs"
    )
    max_workers: Optional[int] = Field(
        default=None, ge=1, description="Worker threads for the *_async operations"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        """Validate and normalize base URL."""
        if not v:
            raise ValueError("base_url cannot be empty")
        return v.rstrip('/')

    @field_validator('timestamp_fraction_digits')
    @classmethod
    def validate_fraction_digits(cls, v):
        if v not in SUPPORTED_FRACTION_DIGITS:
            raise ValueError(f"timestamp_fraction_digits must be one of {SUPPORTED_FRACTION_DIGITS}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()

    def to_json(self) -> str:
        """Convert configuration to JSON string."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HAClientConfig':
        """Create configuration from dictionary."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise HAConfigurationError(f"Invalid configuration: {e}", original_exception=e) from e

    @classmethod
    def from_env(cls, prefix: str = 'HA_', env_file: Optional[Union[str, Path]] = None) -> 'HAClientConfig':
        """Create configuration from ``<prefix>*`` environment variables.

        Args:
            prefix: Environment variable prefix (default: 'HA_')
            env_file: Dotenv file to read instead of the default ./.env

        Raises:
            HAConfigurationError: If required variables are missing or invalid
        """
        try:
            kwargs: Dict[str, Any] = {"_env_prefix": prefix}
            if env_file is not None:
                kwargs["_env_file"] = env_file
            return cls(**kwargs)
        except ValidationError as e:
            raise HAConfigurationError(
                f"Failed to load configuration from environment: {e}", original_exception=e
            ) from e

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'HAClientConfig':
        """Load configuration from a JSON file.

        Raises:
            HAConfigurationError: If the file is missing or not a valid configuration
        """
        path = Path(path)
        if not path.exists():
            raise HAConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise HAConfigurationError(
                f"Invalid JSON in configuration file {path}: {e}", original_exception=e
            ) from e

        return cls.from_dict(data)

    def to_json_file(self, path: Union[str, Path]) -> Path:
        """Save configuration to a JSON file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        return path
