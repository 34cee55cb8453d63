"""Configuration management for MCP Multi-Backend Database Gateway."""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

# Load .env, trying several locations
_env_loaded = False

# An explicit ENV_FILE_PATH wins
env_file = os.getenv('ENV_FILE_PATH')
if env_file and Path(env_file).exists():
    load_dotenv(env_file, override=False)
    _env_loaded = True
else:
    possible_paths = [
        Path.cwd() / '.env',  # current working directory
        Path(__file__).parent.parent.parent / '.env',  # project root
    ]
    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(str(env_path), override=False)
            _env_loaded = True
            break

if not _env_loaded:
    load_dotenv()


# Backend family served by one process
BackendFamily = Literal["cosmos", "sql"]
BACKEND_FAMILIES = ("cosmos", "sql")

# Cosmos DB API dialects
CosmosApiType = Literal["sql", "mongodb", "gremlin", "cassandra", "table"]
COSMOS_API_TYPES = ("sql", "mongodb", "gremlin", "cassandra", "table")

# Relational drivers
RelationalEngine = Literal["mssql", "postgresql"]

REQUIRED_FIELDS: Dict[str, tuple] = {
    "cosmos": ("name", "endpoint", "key", "database"),
    "sql": ("name", "user", "password", "server", "database", "port"),
}

DEFAULT_SERVER_NAMES = {
    "cosmos": "cosmosdb-mcp",
    "sql": "sqlserver-mcp",
}

DEFAULT_CONFIG_FILENAME = "databases.config.json"


def detect_mssql_driver() -> str:
    """Detect an installed SQL Server ODBC driver.

    Returns:
        str: Driver name, preferring Driver 18 > Driver 17 > Driver 13
    """
    try:
        import pyodbc
        available_drivers = pyodbc.drivers()

        preferred_drivers = [
            "ODBC Driver 18 for SQL Server",
            "ODBC Driver 17 for SQL Server",
            "ODBC Driver 13 for SQL Server",
        ]

        for driver in preferred_drivers:
            if driver in available_drivers:
                return driver

        for driver in available_drivers:
            if "SQL Server" in driver:
                return driver
    except (ImportError, Exception):
        # pyodbc missing or driver listing failed
        pass

    # Connection will fail later with a driver error the user can act on
    return "ODBC Driver 18 for SQL Server"


class CosmosBackendConfig(BaseModel):
    """Connection configuration for one Cosmos DB backend."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(description="Unique backend name")
    endpoint: str = Field(description="Cosmos DB account endpoint URL")
    key: str = Field(description="Cosmos DB account key")
    database: str = Field(description="Cosmos DB database id")
    type: CosmosApiType = Field(default="sql", description="Cosmos DB API dialect")

    @property
    def family(self) -> str:
        return "cosmos"

    @property
    def kind(self) -> str:
        return self.type


class SqlServerOptions(BaseModel):
    """Driver options for relational backends."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    encrypt: bool = Field(default=False, description="Use encryption")
    trust_server_certificate: bool = Field(
        default=True,
        alias="trustServerCertificate",
        description="Trust self-signed certificates"
    )
    driver: Optional[str] = Field(default=None, description="ODBC driver (auto-detected if None)")
    connect_timeout: int = Field(default=30, alias="connectTimeout", description="Connection timeout in seconds")


class SqlBackendConfig(BaseModel):
    """Connection configuration for one relational backend."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(description="Unique backend name")
    user: str = Field(description="Database username")
    password: str = Field(description="Database password")
    server: str = Field(description="Database server hostname or IP")
    database: str = Field(description="Database name")
    port: int = Field(description="Database port")
    engine: RelationalEngine = Field(default="mssql", description="Relational driver: mssql or postgresql")
    options: SqlServerOptions = Field(default_factory=SqlServerOptions)

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        return value or {}

    @property
    def family(self) -> str:
        return "sql"

    @property
    def kind(self) -> str:
        return "relational"

    def get_connection_string(self) -> str:
        """Generate ODBC connection string for SQL Server."""
        driver = self.options.driver or os.getenv("MSSQL_DRIVER") or detect_mssql_driver()
        parts = [
            f"DRIVER={{{driver}}}",
            f"SERVER={self.server},{self.port}",
            f"DATABASE={self.database}",
            f"UID={self.user}",
            f"PWD={self.password}",
            f"TIMEOUT={self.options.connect_timeout}"
        ]

        if self.options.encrypt:
            parts.append("Encrypt=yes")
            if self.options.trust_server_certificate:
                parts.append("TrustServerCertificate=yes")
        else:
            parts.append("Encrypt=no")

        return ";".join(parts)


BackendConfig = Union[CosmosBackendConfig, SqlBackendConfig]


def _is_missing(entry: Dict[str, Any], field: str) -> bool:
    value = entry.get(field)
    return value is None or value == "" or value == 0 or value is False


def _build_backend_config(index: int, entry: Any, family: str) -> BackendConfig:
    """Validate one raw `databases` entry and build its config model."""
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Database at index {index}: entry must be an object")

    for field in REQUIRED_FIELDS[family]:
        if _is_missing(entry, field):
            raise ConfigurationError(
                f'Database at index {index}: required field "{field}" is missing',
                {"index": index, "field": field}
            )

    data = dict(entry)
    if family == "cosmos":
        api_type = data.get("type")
        if not api_type:
            data["type"] = "sql"
        elif api_type not in COSMOS_API_TYPES:
            raise ConfigurationError(
                f'Database at index {index}: type "{api_type}" is not valid. '
                f"Must be one of: {', '.join(COSMOS_API_TYPES)}",
                {"index": index, "type": api_type}
            )
        model = CosmosBackendConfig
    else:
        model = SqlBackendConfig

    try:
        return model(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(
            f"Database at index {index}: {problems}",
            {"index": index}
        ) from e


class GatewayConfig(BaseModel):
    """Validated contents of the databases configuration file."""

    model_config = ConfigDict(frozen=True)

    family: BackendFamily
    databases: List[BackendConfig]
    default_database: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, family: str) -> "GatewayConfig":
        """Validate raw configuration data for the given backend family.

        Every entry is validated before the config is returned, so a bad
        entry anywhere in the list aborts loading as a whole.

        Raises:
            ConfigurationError: If the structure or any entry is invalid
        """
        if family not in BACKEND_FAMILIES:
            raise ConfigurationError(
                f"Unknown backend family '{family}'. Must be one of: {', '.join(BACKEND_FAMILIES)}"
            )

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        entries = data.get("databases")
        if not isinstance(entries, list):
            raise ConfigurationError('Configuration must have a "databases" property that is an array')

        if len(entries) == 0:
            raise ConfigurationError("Configuration must contain at least one database")

        databases = [_build_backend_config(i, entry, family) for i, entry in enumerate(entries)]

        default_database = data.get("defaultDatabase")
        if default_database is not None and not isinstance(default_database, str):
            default_database = None

        return cls(family=family, databases=databases, default_database=default_database)

    @classmethod
    def from_file(cls, path: Union[str, Path], family: str) -> "GatewayConfig":
        """Load and validate the databases configuration file."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)}
            )

        try:
            with open(config_path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Error reading {config_path.name}: {e}",
                {"path": str(config_path)}
            ) from e

        return cls.from_dict(data, family)


class AppConfig(BaseModel):
    """Process-level settings for the gateway."""

    family: BackendFamily = Field(default="sql", description="Backend family served by this process")
    config_path: str = Field(default=DEFAULT_CONFIG_FILENAME, description="Path to databases config JSON")
    server_name: Optional[str] = Field(default=None, description="MCP server name identifier")
    tool_prefix: Optional[str] = Field(default=None, description="Prefix for MCP tool names (e.g. sql_query)")
    debug: bool = Field(default=False, description="Write diagnostic logging to stderr")
    pool_size: int = Field(default=10, description="Connection pool size for relational backends")
    command_timeout: int = Field(default=60, description="Relational command timeout in seconds")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create application configuration from environment variables."""
        family = os.getenv("MCP_BACKEND_FAMILY", "sql").lower()
        if family not in BACKEND_FAMILIES:
            raise ConfigurationError(
                f"MCP_BACKEND_FAMILY must be one of: {', '.join(BACKEND_FAMILIES)} (got '{family}')"
            )

        return cls(
            family=family,
            config_path=os.getenv("DATABASES_CONFIG_PATH", DEFAULT_CONFIG_FILENAME),
            server_name=os.getenv("MCP_SERVER_NAME") or None,
            tool_prefix=os.getenv("TOOL_PREFIX") or None,
            debug=os.getenv("DEBUG_MCP", "false").lower() == "true",
            pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
            command_timeout=int(os.getenv("DB_COMMAND_TIMEOUT", "60"))
        )

    def get_server_name(self) -> str:
        return self.server_name or DEFAULT_SERVER_NAMES[self.family]

    def get_tool_prefix(self) -> str:
        return self.tool_prefix or self.family

    def get_config_path(self) -> Path:
        """Get path to the databases configuration file.

        Relative paths are looked up in the current directory first, then in
        the project root. If neither exists the cwd-relative path is returned
        so the load error names it.
        """
        config_path = Path(self.config_path)
        if config_path.is_absolute() or config_path.exists():
            return config_path

        project_root = Path(__file__).parent.parent.parent
        full_path = project_root / config_path
        if full_path.exists():
            return full_path

        return config_path
