"""
Ride Tracker Transfer - Configuration
Settings come from the environment (with a local .env loaded by python-dotenv)
or, when ENVIRONMENT=production, from AWS SSM Parameter Store.
"""

import logging
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

SSM_PREFIX_DEFAULT = '/ridetracker'


class ConfigurationError(Exception):
    """Raised when a required setting cannot be resolved."""
    pass


class Config:
    """Resolves setting names to string values, with typed helpers for the few non-string keys."""

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'local')
        self._ssm_client = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if self.environment == 'production':
            return self._get_from_ssm(key, default)
        return os.getenv(key, default)

    def _get_from_ssm(self, key: str, default: Optional[str]) -> Optional[str]:
        """
        Read `<AWS_SSM_PREFIX>/<key>` from SSM.

        A missing parameter falls back to default. Any other failure also
        falls back (with a warning) when a default exists.

        Raises:
            ConfigurationError: If the value cannot be read and there is no default
        """
        name = f"{os.getenv('AWS_SSM_PREFIX', SSM_PREFIX_DEFAULT)}/{key}"
        try:
            if self._ssm_client is None:
                import boto3
                self._ssm_client = boto3.client('ssm', region_name=os.getenv('AWS_REGION', 'us-east-1'))
            return self._ssm_client.get_parameter(Name=name, WithDecryption=True)['Parameter']['Value']
        except Exception as e:
            missing = type(e).__name__ == 'ParameterNotFound'
            if default is not None:
                if not missing:
                    logging.warning(f"SSM lookup of {name} failed ({type(e).__name__}); using default")
                return default
            if missing:
                raise ConfigurationError(f"Required parameter '{key}' not found in SSM at '{name}'")
            raise ConfigurationError(f"Could not read '{key}' from SSM: {type(e).__name__}: {e}")

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key, str(default))
        try:
            return int(value)
        except ValueError:
            logging.warning(f"Config {key}={value!r} is not an integer; using {default}")
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key, str(default))
        return value.strip().lower() in ('true', '1', 'yes', 'on')


config = Config()


DATABASE_URL = config.get('DATABASE_URL', 'sqlite:///ride_tracker.db')

FLASK_ENV = config.get('FLASK_ENV', 'development')
FLASK_DEBUG = config.get_bool('FLASK_DEBUG', True)
SECRET_KEY = config.get('SECRET_KEY', 'dev-secret-key-change-in-production')

LOG_LEVEL = config.get('LOG_LEVEL', 'INFO')

# Import text longer than this is rejected before detection
TRANSFER_MAX_PAYLOAD_CHARS = config.get_int('TRANSFER_MAX_PAYLOAD_CHARS', 1_000_000)
TRANSFER_DEFAULT_STRATEGY = config.get('TRANSFER_DEFAULT_STRATEGY', 'merge')
