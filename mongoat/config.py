"""
Configuration management for MONGOAT.

Every setting is resolved with the same precedence: an explicit argument,
then the environment variable, then the configured default, then the
built-in fallback.
"""

import os
from typing import Any, Mapping
from urllib.parse import quote_plus

from .constants import (
    DEFAULT_DB_NAME,
    DEFAULT_MONGODB_URI,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    ENV_ENVIRONMENT,
    ENV_MONGODB_DB_NAME,
    ENV_MONGODB_PASSWORD,
    ENV_MONGODB_URI,
    ENV_MONGODB_USERNAME,
    ENV_PACKAGE,
    ENV_TEST_WORKER,
    PRODUCTION_ENV,
    URI_PASSWORD_PLACEHOLDER,
    URI_USERNAME_PLACEHOLDER,
)
from .exceptions import ConfigurationError


def _resolve(
    explicit: Any,
    env_var: str,
    defaults: Mapping[str, Any],
    key: str,
    fallback: Any = None,
) -> Any:
    if explicit:
        return explicit
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    if defaults.get(key):
        return defaults[key]
    return fallback


def _fallback_db_name() -> str:
    package = os.getenv(ENV_PACKAGE)
    if not package:
        return DEFAULT_DB_NAME
    worker = os.getenv(ENV_TEST_WORKER, "")
    return f"{package}-test-{worker}"


class DatabaseConfig:
    """
    MongoDB connection configuration.

    Example:
        # Using environment variables (MONGODB_URI, MONGODB_DB_NAME, ...)
        config = DatabaseConfig()

        # Explicit values win over the environment
        config = DatabaseConfig(
            uri="mongodb+srv://<username>:<password>@cluster0.example.net/",
            db_name="my_db",
            username="app",
            password="s3cret",
        )

        # Configured defaults apply when neither is set
        config = DatabaseConfig(defaults={"db_name": "my_db"})
    """

    def __init__(
        self,
        uri: str | None = None,
        db_name: str | None = None,
        username: str | None = None,
        password: str | None = None,
        defaults: Mapping[str, Any] | None = None,
        server_selection_timeout_ms: int | None = None,
        **client_options: Any,
    ):
        """
        Initialize configuration.

        Args:
            uri: MongoDB connection URI, may contain <username>/<password>
                placeholders (defaults to MONGODB_URI env var)
            db_name: Database name (defaults to MONGODB_DB_NAME env var)
            username: Username substituted into the URI (defaults to MONGODB_USERNAME)
            password: Password substituted into the URI (defaults to MONGODB_PASSWORD)
            defaults: Configured defaults keyed by "uri", "db_name", "username",
                "password", used when neither argument nor env var is set
            server_selection_timeout_ms: Server selection timeout in ms (defaults to 5000)
            **client_options: Extra keyword arguments forwarded to the Motor client
        """
        defaults = defaults or {}
        self.uri = _resolve(uri, ENV_MONGODB_URI, defaults, "uri", DEFAULT_MONGODB_URI)
        self.db_name = _resolve(db_name, ENV_MONGODB_DB_NAME, defaults, "db_name") or (
            _fallback_db_name()
        )
        self.username = _resolve(username, ENV_MONGODB_USERNAME, defaults, "username")
        self.password = _resolve(password, ENV_MONGODB_PASSWORD, defaults, "password")
        self.server_selection_timeout_ms = server_selection_timeout_ms or int(
            defaults.get("server_selection_timeout_ms", DEFAULT_SERVER_SELECTION_TIMEOUT_MS)
        )
        self.client_options = dict(client_options)

    @property
    def connection_url(self) -> str:
        """Connection URI with credential placeholders substituted."""
        url = self.uri
        if self.username:
            url = url.replace(URI_USERNAME_PLACEHOLDER, quote_plus(self.username))
        if self.password:
            url = url.replace(URI_PASSWORD_PLACEHOLDER, quote_plus(self.password))
        return url

    @property
    def is_production(self) -> bool:
        return os.getenv(ENV_ENVIRONMENT, "").lower() == PRODUCTION_ENV

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.uri:
            raise ConfigurationError(
                "uri is required (set MONGODB_URI environment variable or pass directly)",
                config_key="uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set MONGODB_DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        url = self.connection_url
        for placeholder in (URI_USERNAME_PLACEHOLDER, URI_PASSWORD_PLACEHOLDER):
            if placeholder in url:
                raise ConfigurationError(
                    f"uri contains {placeholder} but no value was configured for it",
                    config_key="uri",
                )

        if self.server_selection_timeout_ms < 1000:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1000, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )
