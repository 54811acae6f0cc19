from .client import ChooseRequest, PreferredPicturesClient
from .config_types import ClientConfig
from .errors import ConfigurationError, PreferredPicturesError, ValidationError
from .signing import (
    CURRENT_PROTOCOL,
    LEGACY_PROTOCOL,
    SignatureScope,
    SigningField,
    SigningProtocol,
    canonical_string,
    sign,
)

__all__ = [
    "PreferredPicturesClient",
    "ChooseRequest",
    "ClientConfig",
    "PreferredPicturesError",
    "ConfigurationError",
    "ValidationError",
    "SignatureScope",
    "SigningField",
    "SigningProtocol",
    "CURRENT_PROTOCOL",
    "LEGACY_PROTOCOL",
    "canonical_string",
    "sign",
]
