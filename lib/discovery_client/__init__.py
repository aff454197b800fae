from .authenticators import (
    BasicAuthenticator,
    BearerTokenAuthenticator,
    IamAuthenticator,
    NoAuthAuthenticator,
    get_authenticator_from_environment,
)
from .client import DiscoveryClient
from .config_types import ClientConfig
from .errors import ApiError, AuthError, ConfigError, MissingArgumentError, NetworkError
from .response import DetailedResponse
from .version import __version__

__all__ = [
    "DiscoveryClient",
    "ClientConfig",
    "DetailedResponse",
    "ApiError",
    "AuthError",
    "ConfigError",
    "MissingArgumentError",
    "NetworkError",
    "BasicAuthenticator",
    "BearerTokenAuthenticator",
    "IamAuthenticator",
    "NoAuthAuthenticator",
    "get_authenticator_from_environment",
    "__version__",
]
