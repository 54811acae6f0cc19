from __future__ import annotations

import hmac
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .signing import get_protocol

DEFAULT_ENDPOINT = "https://api.preferred-pictures.com"
DEFAULT_MAX_CHOICES = 35
DEFAULT_ALGORITHM = "sha256"
DEFAULT_PROTOCOL = "current"
DEFAULT_EXPIRATION_TTL = 3600


@dataclass(frozen=True)
class ClientConfig:
    identity: str
    secret_key: str = field(repr=False)
    max_choices: int = DEFAULT_MAX_CHOICES
    endpoint: str = DEFAULT_ENDPOINT
    algorithm: str = DEFAULT_ALGORITHM
    protocol: str = DEFAULT_PROTOCOL

    def __post_init__(self) -> None:
        if not self.identity:
            raise ConfigurationError("identity is required")
        if not self.secret_key:
            raise ConfigurationError("secret_key is required")
        if isinstance(self.max_choices, bool) or not isinstance(self.max_choices, int) or self.max_choices < 1:
            raise ConfigurationError(f"max_choices must be a positive integer, got {self.max_choices!r}")
        if not self.endpoint:
            raise ConfigurationError("endpoint is required")
        try:
            hmac.new(b"", b"", self.algorithm).hexdigest()
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"unsupported signing algorithm: {self.algorithm}") from e

        get_protocol(self.protocol)
