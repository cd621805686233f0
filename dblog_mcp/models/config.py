"""Database and tool configuration loader with profile support."""

import os
import yaml
from urllib.parse import urlparse
from typing import Dict, Any, Optional
from pathlib import Path
from dotenv import load_dotenv


class DatabaseProfile:
    """Represents a single database profile configuration."""

    def __init__(self, name: str, config: Dict[str, Any]):
        self.name = name
        self.config = config
        self.enabled = config.get('enabled', True)
        self.uri = config.get('uri', '')
        self.description = config.get('description', '')
        self.connection_options = config.get('connection_options', {}) or {}

        if self.uri:
            self._parse_uri()

    def _parse_uri(self):
        """Parse PostgreSQL URI into components."""
        parsed = urlparse(self.uri)
        self._host = parsed.hostname or 'localhost'
        self._port = parsed.port or 5432
        self._database = parsed.path.lstrip('/') if parsed.path else 'postgres'
        self._user = parsed.username or 'postgres'
        self._password = parsed.password or ''

    @property
    def host(self) -> str:
        return getattr(self, '_host', 'localhost')

    @property
    def port(self) -> int:
        return getattr(self, '_port', 5432)

    @property
    def database(self) -> str:
        return getattr(self, '_database', 'postgres')

    @property
    def user(self) -> str:
        return getattr(self, '_user', 'postgres')

    @property
    def password(self) -> str:
        return getattr(self, '_password', '')

    @property
    def connect_timeout(self) -> int:
        return int(self.connection_options.get('connect_timeout', os.getenv('DB_CONNECT_TIMEOUT', '10')))

    @property
    def query_timeout(self) -> int:
        return int(self.connection_options.get('query_timeout', os.getenv('DB_QUERY_TIMEOUT', '0')))

    @property
    def timezone(self) -> Optional[str]:
        return self.connection_options.get('timezone', os.getenv('DB_TIMEZONE')) or None

    def to_dict(self) -> Dict[str, Any]:
        """Convert profile to the dictionary consumed by ConnectionProvider."""
        return {
            'host': self.host,
            'port': self.port,
            'database': self.database,
            'user': self.user,
            'password': self.password,
            'connect_timeout': self.connect_timeout,
            'query_timeout': self.query_timeout,
            'timezone': self.timezone
        }


class DatabaseConfig:
    """Database configuration resolved from URI, YAML profile or environment."""

    def __init__(self, profile_name: Optional[str] = None):
        load_dotenv()

        self.profiles: Dict[str, DatabaseProfile] = {}
        self.current_profile: Optional[DatabaseProfile] = None

        self._load_configuration(profile_name)

        if self.current_profile:
            self.validate()

    def _load_configuration(self, profile_name: Optional[str] = None):
        """Load database configuration from the first source that provides one."""

        # Priority 1: DATABASE_URI environment variable
        if os.getenv('DATABASE_URI'):
            self._load_from_uri()
            return

        # Priority 2: named profile from YAML config
        if profile_name or os.getenv('DATABASE_PROFILE'):
            profile = profile_name or os.getenv('DATABASE_PROFILE')
            if self._load_from_profile(profile):
                return

        # Priority 3: YAML default profile
        if self._load_from_yaml_default():
            return

        # Priority 4: individual environment variables
        self._load_from_env()

    def _load_from_uri(self):
        """Load configuration from DATABASE_URI environment variable."""
        profile = DatabaseProfile('uri_override', {
            'description': 'Configuration from DATABASE_URI environment variable',
            'uri': os.getenv('DATABASE_URI'),
            'enabled': True
        })
        self.profiles['uri_override'] = profile
        self.current_profile = profile

    def _load_from_profile(self, profile_name: str) -> bool:
        """Load configuration from a specific YAML profile."""
        if not self._load_yaml_config():
            return False

        if profile_name not in self.profiles:
            raise ValueError(f"Database profile '{profile_name}' not found in configuration")

        profile = self.profiles[profile_name]
        if not profile.enabled:
            raise ValueError(f"Database profile '{profile_name}' is disabled")

        self.current_profile = profile
        return True

    def _load_from_yaml_default(self) -> bool:
        """Load default profile from YAML configuration."""
        if self._load_yaml_config():
            default_profile = self._yaml_config.get('default_profile')
            if default_profile in self.profiles:
                profile = self.profiles[default_profile]
                if profile.enabled:
                    self.current_profile = profile
                    return True
        return False

    def _load_yaml_config(self) -> bool:
        """Load database profiles from YAML configuration file."""
        if hasattr(self, '_yaml_loaded'):
            return self._yaml_loaded

        possible_paths = [
            os.getenv('DATABASES_CONFIG', 'config/databases.yaml'),
            Path(__file__).parent.parent.parent / 'config' / 'databases.yaml'
        ]

        for path in possible_paths:
            try:
                with open(path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
            except (FileNotFoundError, yaml.YAMLError):
                continue

            self._yaml_config = config_data
            for profile_name, profile_config in (config_data.get('databases') or {}).items():
                self.profiles[profile_name] = DatabaseProfile(profile_name, profile_config)

            self._yaml_loaded = True
            return True

        self._yaml_loaded = False
        return False

    def _load_from_env(self):
        """Load configuration from individual environment variables."""
        self._validate_numeric_config()

        profile = DatabaseProfile('env', {
            'description': 'Configuration from individual environment variables',
            'enabled': True
        })
        profile._host = os.getenv('DB_HOST', 'localhost')
        profile._port = int(os.getenv('DB_PORT', '5432'))
        profile._database = os.getenv('DB_DATABASE', 'postgres')
        profile._user = os.getenv('DB_USER', 'postgres')
        profile._password = os.getenv('DB_PASSWORD', '')

        self.profiles['env'] = profile
        self.current_profile = profile

    @property
    def host(self) -> str:
        return self.current_profile.host if self.current_profile else 'localhost'

    @property
    def port(self) -> int:
        return self.current_profile.port if self.current_profile else 5432

    @property
    def database(self) -> str:
        return self.current_profile.database if self.current_profile else 'postgres'

    @property
    def user(self) -> str:
        return self.current_profile.user if self.current_profile else 'postgres'

    @property
    def password(self) -> str:
        return self.current_profile.password if self.current_profile else ''

    @property
    def connect_timeout(self) -> int:
        return self.current_profile.connect_timeout if self.current_profile else 10

    @property
    def query_timeout(self) -> int:
        return self.current_profile.query_timeout if self.current_profile else 0

    @property
    def timezone(self) -> Optional[str]:
        return self.current_profile.timezone if self.current_profile else None

    def validate(self):
        """Validate required configuration."""
        if not self.current_profile:
            raise ValueError("No database profile configured")

        name = self.current_profile.name
        if not self.password:
            raise ValueError(f"Password is required for database profile '{name}'")
        if not self.host:
            raise ValueError(f"Host is required for database profile '{name}'")
        if not self.database:
            raise ValueError(f"Database name is required for database profile '{name}'")
        if not self.user:
            raise ValueError(f"User is required for database profile '{name}'")

    def _validate_numeric_config(self):
        """Validate that numeric environment values can be parsed."""
        for var, default in (('DB_PORT', '5432'),
                             ('DB_CONNECT_TIMEOUT', '10'),
                             ('DB_QUERY_TIMEOUT', '0')):
            value = os.getenv(var, default)
            try:
                int(value)
            except ValueError:
                raise ValueError(f"Invalid {var} value: {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert current profile to dictionary for ConnectionProvider."""
        if not self.current_profile:
            raise ValueError("No current database profile configured")

        return self.current_profile.to_dict()


class ToolSettings:
    """Settings that shape tool behaviour rather than the connection."""

    def __init__(self,
                 log_table: str = 'log',
                 log_category_table: str = 'log_category',
                 max_lob_bytes: int = 10 * 1024 * 1024,
                 sql_delimiter: str = ','):
        self.log_table = log_table
        self.log_category_table = log_category_table
        self.max_lob_bytes = max_lob_bytes
        self.sql_delimiter = sql_delimiter

    @classmethod
    def from_env(cls) -> 'ToolSettings':
        """Build settings from environment variables."""
        load_dotenv()

        max_lob_bytes = os.getenv('MAX_LOB_BYTES', str(10 * 1024 * 1024))
        try:
            max_lob_bytes = int(max_lob_bytes)
        except ValueError:
            raise ValueError(f"Invalid MAX_LOB_BYTES value: {max_lob_bytes}")

        return cls(
            log_table=os.getenv('LOG_TABLE', 'log'),
            log_category_table=os.getenv('LOG_CATEGORY_TABLE', 'log_category'),
            max_lob_bytes=max_lob_bytes,
            sql_delimiter=os.getenv('SQL_DELIMITER', ',')
        )
