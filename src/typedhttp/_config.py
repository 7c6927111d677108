import os
from enum import Enum
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from .models.errors import BaseHostMissingError

CRITICAL_TIMEOUT = 2.0
DEFAULT_TIMEOUT = 100.0

ENV_PREFIX = "TYPEDHTTP_"


class UrlScheme(str, Enum):
    HTTP = "http"
    HTTPS = "https"

    @classmethod
    def from_name(cls, name: str) -> "UrlScheme":
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Scheme {name} is not supported!") from None


class ServiceConfig(BaseModel):
    """Construction-time settings of a web service.

    Attributes:
        base_host: Host (optionally with port) all requests are sent to.
        default_scheme: Scheme used by builders created through the service.
        critical: Critical services use a fixed ``CRITICAL_TIMEOUT`` for every request.
        timeout: Client timeout in seconds for non-critical services.
        logging_enabled: Log urls, request and response bodies at DEBUG level.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    base_host: str
    default_scheme: UrlScheme = UrlScheme.HTTPS
    critical: bool = True
    timeout: Optional[float] = DEFAULT_TIMEOUT
    logging_enabled: bool = False

    @property
    def effective_timeout(self) -> Optional[float]:
        return CRITICAL_TIMEOUT if self.critical else self.timeout

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, dotenv_path: Optional[str] = None
    ) -> "ServiceConfig":
        """Build a config from ``<prefix>*`` environment variables.

        Variables already set in the environment win over the ones in the
        optional ``.env`` file.

        Raises:
            BaseHostMissingError: If ``<prefix>BASE_HOST`` is not set.
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path=dotenv_path, override=False)

        base_host = os.environ.get(f"{prefix}BASE_HOST")
        if not base_host:
            raise BaseHostMissingError(f"{prefix}BASE_HOST")

        values: dict = {"base_host": base_host}
        scheme = os.environ.get(f"{prefix}SCHEME")
        if scheme:
            values["default_scheme"] = UrlScheme.from_name(scheme)
        for key, env_name in (
            ("critical", "CRITICAL"),
            ("timeout", "TIMEOUT"),
            ("logging_enabled", "LOGGING"),
        ):
            value = os.environ.get(f"{prefix}{env_name}")
            if value is not None:
                values[key] = value

        return cls.model_validate(values)
