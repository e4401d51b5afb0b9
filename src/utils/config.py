"""
Binary File Importer - Configuration Management
Handles environment configuration with AWS SSM Parameter Store for production
and python-dotenv for local development.
"""

import os
from typing import Dict, Optional
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()


class Config:
    """
    Configuration manager with dual-mode operation:
    - Local: Reads from .env file via python-dotenv
    - Production: Reads from AWS SSM Parameter Store
    """

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'local')
        self._ssm_client = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration value from SSM (production) or environment (local).

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if self.environment == 'production':
            return self._get_from_ssm(key, default)
        else:
            return os.getenv(key, default)

    def _get_from_ssm(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration from AWS SSM Parameter Store.

        Args:
            key: Parameter key name
            default: Default value if parameter not found

        Returns:
            Parameter value or default

        Raises:
            ConfigurationError: If parameter not found and no default provided,
                               or if AWS credentials/permissions are invalid
        """
        ssm_prefix = os.getenv('AWS_SSM_PREFIX', '/binaryfileimporter')
        parameter_name = f"{ssm_prefix}/{key}"

        if self._ssm_client is None:
            import boto3
            self._ssm_client = boto3.client(
                'ssm',
                region_name=os.getenv('AWS_REGION', 'us-east-1')
            )

        try:
            response = self._ssm_client.get_parameter(
                Name=parameter_name,
                WithDecryption=True
            )
            return response['Parameter']['Value']

        except self._ssm_client.exceptions.ParameterNotFound:
            if default is not None:
                return default
            raise ConfigurationError(
                f"Required parameter '{key}' not found in SSM at path '{parameter_name}'. "
                f"Please create the parameter or provide a default value."
            )

        except Exception as e:
            error_type = type(e).__name__
            if default is not None:
                import logging
                logging.warning(
                    f"Failed to fetch SSM parameter '{key}': {error_type}: {e}. "
                    f"Using default value."
                )
                return default
            raise ConfigurationError(
                f"Failed to fetch parameter '{key}' from SSM: {error_type}: {e}. "
                f"Check AWS credentials, IAM permissions, and network connectivity."
            )

    def get_int(self, key: str, default: int) -> int:
        """
        Get configuration value as integer.

        Args:
            key: Configuration key name
            default: Default value if key not found or conversion fails

        Returns:
            Integer value or default
        """
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            import logging
            logging.warning(
                f"Invalid integer for config key '{key}': '{value}'. "
                f"Using default={default}. Error: {e}"
            )
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        """
        Get configuration value as boolean.

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Boolean value or default
        """
        value = self.get(key, str(default))
        if value is None:
            return default
        return value.lower() in ('true', '1', 'yes', 'on')

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == 'production'

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == 'local'


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


def parse_file_type_declarations(value: Optional[str]) -> Dict[str, str]:
    """
    Parse declared file types from a "Name=Value;Name=Value" string.

    A value of "Database" selects database storage; anything else is taken
    as the filesystem root path for that file type.

    Args:
        value: Raw declaration string (None or empty yields no declarations)

    Returns:
        Ordered dict of file type name -> storage value

    Raises:
        ConfigurationError: If an item has no '=' or an empty name
    """
    declarations: Dict[str, str] = {}
    if not value:
        return declarations

    for item in value.split(';'):
        item = item.strip()
        if not item:
            continue
        name, sep, storage = item.partition('=')
        name = name.strip()
        if not sep or not name:
            raise ConfigurationError(
                f"Invalid file type declaration '{item}'. Expected NAME=VALUE"
            )
        declarations[name] = storage.strip()

    return declarations


# Global configuration instance
config = Config()


# Database configuration
DATABASE_URL = config.get('DATABASE_URL', '')
DB_HOST = config.get('DB_HOST', 'localhost')
DB_PORT = config.get_int('DB_PORT', 3306)
DB_NAME = config.get('DB_NAME', 'binary_file_import_dev')
DB_USER = config.get('DB_USER', 'root')
DB_PASSWORD = config.get('DB_PASSWORD', '')

# Logging configuration
LOG_LEVEL = config.get('LOG_LEVEL', 'INFO')

# Import settings
IMPORT_USER = config.get('IMPORT_USER', '')
IMPORT_REPORTING_NUMBER = config.get_int('IMPORT_REPORTING_NUMBER', 100)
BINARY_FILE_TYPES = parse_file_type_declarations(config.get('BINARY_FILE_TYPES', ''))
ASSET_ROUTE_ROOT = config.get('ASSET_ROUTE_ROOT', '~')
PREVIEW_ENTRY_LIMIT = config.get_int('PREVIEW_ENTRY_LIMIT', 50)

# Attribute keys shared with the host record store
ROOT_PATH_ATTRIBUTE_KEY = 'RootPath'
BLACKLIST_ATTRIBUTE_KEY = 'ContentFiletypeBlacklist'
DATABASE_STORAGE_VALUE = 'Database'

# Database connection pool settings
DB_POOL_SIZE = 10
DB_POOL_MAX_OVERFLOW = 20
DB_POOL_RECYCLE = 3600  # Recycle connections after 1 hour
DB_POOL_PRE_PING = True  # Health check connections before use
