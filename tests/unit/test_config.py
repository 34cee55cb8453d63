"""
Configuration loading unit tests

Covers databases config validation and environment settings.
"""

import json

import pytest

from core.config import (
    AppConfig,
    CosmosBackendConfig,
    GatewayConfig,
    SqlBackendConfig,
)
from core.exceptions import ConfigurationError


class TestGatewayConfigStructure:
    """Top-level structure validation"""

    def test_missing_databases_property(self):
        """❌ No databases property"""
        with pytest.raises(ConfigurationError, match='"databases" property'):
            GatewayConfig.from_dict({}, "sql")

    def test_databases_not_a_list(self):
        """❌ databases is not an array"""
        with pytest.raises(ConfigurationError, match="array"):
            GatewayConfig.from_dict({"databases": {"name": "A"}}, "sql")

    def test_empty_databases(self):
        """❌ Zero entries aborts startup"""
        with pytest.raises(ConfigurationError, match="at least one database"):
            GatewayConfig.from_dict({"databases": []}, "cosmos")

    def test_not_an_object(self):
        """❌ Top level must be an object"""
        with pytest.raises(ConfigurationError):
            GatewayConfig.from_dict(["A"], "sql")

    def test_unknown_family(self, sql_config_data):
        """❌ Unknown backend family"""
        with pytest.raises(ConfigurationError, match="Unknown backend family"):
            GatewayConfig.from_dict(sql_config_data, "mongo")


class TestSqlEntries:
    """Relational entry validation"""

    def test_valid_entries(self, sql_config_data):
        """✅ Entries load in order with defaults applied"""
        config = GatewayConfig.from_dict(sql_config_data, "sql")

        assert [db.name for db in config.databases] == ["A", "B"]
        first = config.databases[0]
        assert isinstance(first, SqlBackendConfig)
        assert first.kind == "relational"
        assert first.engine == "mssql"
        assert first.options.encrypt is False
        assert first.options.trust_server_certificate is True

    def test_options_aliases(self, sql_config_data):
        """✅ camelCase driver options are accepted"""
        config = GatewayConfig.from_dict(sql_config_data, "sql")

        options = config.databases[1].options
        assert options.encrypt is True
        assert options.trust_server_certificate is False

    def test_null_options_use_defaults(self, sql_config_data):
        """✅ options: null falls back to defaults"""
        sql_config_data["databases"][0]["options"] = None
        config = GatewayConfig.from_dict(sql_config_data, "sql")

        assert config.databases[0].options.trust_server_certificate is True

    @pytest.mark.parametrize("field", ["name", "user", "password", "server", "database", "port"])
    def test_missing_required_field(self, sql_config_data, field):
        """❌ Missing field names the entry index and field"""
        del sql_config_data["databases"][1][field]

        with pytest.raises(ConfigurationError) as exc_info:
            GatewayConfig.from_dict(sql_config_data, "sql")

        assert "index 1" in exc_info.value.message
        assert f'"{field}"' in exc_info.value.message
        assert exc_info.value.details == {"index": 1, "field": field}

    def test_empty_value_counts_as_missing(self, sql_config_data):
        """❌ Empty string is treated as missing"""
        sql_config_data["databases"][0]["password"] = ""

        with pytest.raises(ConfigurationError, match='index 0: required field "password"'):
            GatewayConfig.from_dict(sql_config_data, "sql")

    def test_invalid_port_type(self, sql_config_data):
        """❌ Non-numeric port is reported with its index"""
        sql_config_data["databases"][0]["port"] = "not-a-port"

        with pytest.raises(ConfigurationError, match="index 0"):
            GatewayConfig.from_dict(sql_config_data, "sql")

    def test_connection_string(self, sql_config_data):
        """✅ ODBC connection string built from entry"""
        sql_config_data["databases"][0]["options"] = {"driver": "ODBC Driver 17 for SQL Server"}
        config = GatewayConfig.from_dict(sql_config_data, "sql").databases[0]

        conn_str = config.get_connection_string()

        assert "DRIVER={ODBC Driver 17 for SQL Server}" in conn_str
        assert "SERVER=sql-a.local,1433" in conn_str
        assert "DATABASE=sales" in conn_str
        assert "UID=sa" in conn_str
        assert "Encrypt=no" in conn_str


class TestCosmosEntries:
    """Cosmos DB entry validation"""

    def test_valid_entries(self, cosmos_config_data):
        """✅ Dialect defaults to sql"""
        config = GatewayConfig.from_dict(cosmos_config_data, "cosmos")

        first, second = config.databases
        assert isinstance(first, CosmosBackendConfig)
        assert first.type == "sql"
        assert first.kind == "sql"
        assert second.type == "gremlin"

    @pytest.mark.parametrize("field", ["name", "endpoint", "key", "database"])
    def test_missing_required_field(self, cosmos_config_data, field):
        """❌ Missing Cosmos field"""
        del cosmos_config_data["databases"][0][field]

        with pytest.raises(ConfigurationError, match=f'index 0: required field "{field}"'):
            GatewayConfig.from_dict(cosmos_config_data, "cosmos")

    def test_invalid_dialect(self, cosmos_config_data):
        """❌ Dialect outside the closed set"""
        cosmos_config_data["databases"][1]["type"] = "graphql"

        with pytest.raises(ConfigurationError) as exc_info:
            GatewayConfig.from_dict(cosmos_config_data, "cosmos")

        assert "index 1" in exc_info.value.message
        assert "graphql" in exc_info.value.message
        assert "cassandra" in exc_info.value.message

    def test_config_is_immutable(self, cosmos_config_data):
        """✅ Loaded configs cannot be mutated"""
        config = GatewayConfig.from_dict(cosmos_config_data, "cosmos").databases[0]

        with pytest.raises(Exception):
            config.endpoint = "https://evil.example"


class TestDefaultDatabase:
    """defaultDatabase is carried through as configured"""

    def test_default_database_kept(self, sql_config_data):
        sql_config_data["defaultDatabase"] = "B"
        config = GatewayConfig.from_dict(sql_config_data, "sql")
        assert config.default_database == "B"

    def test_unknown_default_is_not_an_error(self, sql_config_data):
        """✅ Unknown default is not validated here"""
        sql_config_data["defaultDatabase"] = "Z"
        config = GatewayConfig.from_dict(sql_config_data, "sql")
        assert config.default_database == "Z"


class TestConfigFile:
    """Reading the configuration file"""

    def test_file_not_found(self, tmp_path):
        """❌ Missing file names the path"""
        missing = tmp_path / "databases.config.json"

        with pytest.raises(ConfigurationError, match="not found"):
            GatewayConfig.from_file(missing, "sql")

    def test_invalid_json(self, tmp_path):
        """❌ Unparseable JSON"""
        path = tmp_path / "databases.config.json"
        path.write_text("{ not json", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Error reading"):
            GatewayConfig.from_file(path, "sql")

    def test_load_from_file(self, tmp_path, cosmos_config_data):
        """✅ Valid file loads"""
        path = tmp_path / "databases.config.json"
        path.write_text(json.dumps(cosmos_config_data), encoding="utf-8")

        config = GatewayConfig.from_file(path, "cosmos")

        assert config.family == "cosmos"
        assert len(config.databases) == 2


class TestAppConfig:
    """Environment settings"""

    def test_defaults(self, monkeypatch):
        for var in ("MCP_BACKEND_FAMILY", "DATABASES_CONFIG_PATH", "MCP_SERVER_NAME", "TOOL_PREFIX", "DEBUG_MCP"):
            monkeypatch.delenv(var, raising=False)

        config = AppConfig.from_env()

        assert config.family == "sql"
        assert config.debug is False
        assert config.get_server_name() == "sqlserver-mcp"
        assert config.get_tool_prefix() == "sql"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MCP_BACKEND_FAMILY", "COSMOS")
        monkeypatch.setenv("DEBUG_MCP", "true")
        monkeypatch.setenv("TOOL_PREFIX", "docs")
        monkeypatch.delenv("MCP_SERVER_NAME", raising=False)

        config = AppConfig.from_env()

        assert config.family == "cosmos"
        assert config.debug is True
        assert config.get_server_name() == "cosmosdb-mcp"
        assert config.get_tool_prefix() == "docs"

    def test_invalid_family(self, monkeypatch):
        """❌ Unknown family in env"""
        monkeypatch.setenv("MCP_BACKEND_FAMILY", "oracle")

        with pytest.raises(ConfigurationError, match="MCP_BACKEND_FAMILY"):
            AppConfig.from_env()

    def test_config_path_prefers_existing_cwd_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "custom.json").write_text("{}", encoding="utf-8")

        config = AppConfig(config_path="custom.json")

        assert config.get_config_path().name == "custom.json"
        assert config.get_config_path().exists()
