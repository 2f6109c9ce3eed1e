from ._version import __version__
from .env import ConfigurationError, EnvValidator, RuntimeContext, create_env

__all__ = ["__version__", "create_env", "EnvValidator", "RuntimeContext", "ConfigurationError"]
