"""
pytest configuration

Test environment setup, shared fixtures and fake backend connectors.
"""

import copy
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


SQL_DATABASES = {
    "databases": [
        {
            "name": "A",
            "user": "sa",
            "password": "secret",
            "server": "sql-a.local",
            "database": "sales",
            "port": 1433
        },
        {
            "name": "B",
            "user": "reporter",
            "password": "secret",
            "server": "sql-b.local",
            "database": "reports",
            "port": 1434,
            "options": {"encrypt": True, "trustServerCertificate": False}
        }
    ]
}

COSMOS_DATABASES = {
    "databases": [
        {
            "name": "A",
            "endpoint": "https://a.documents.azure.com:443/",
            "key": "a-key",
            "database": "catalog"
        },
        {
            "name": "B",
            "endpoint": "https://b.documents.azure.com:443/",
            "key": "b-key",
            "database": "graph",
            "type": "gremlin"
        }
    ]
}


def make_fake_connector(config):
    """AsyncMock standing in for an opened backend connector."""
    connector = AsyncMock()
    connector.config = config
    connector.name = config.name

    # relational surface
    connector.execute_query.return_value = {"columns": ["id"], "rows": [{"id": 1}, {"id": 2}]}
    connector.execute_command.return_value = {"rows_affected": [3], "rows": []}
    connector.list_tables.return_value = [
        {"TABLE_SCHEMA": "dbo", "TABLE_NAME": "orders", "TABLE_TYPE": "BASE TABLE"}
    ]
    connector.describe_table.return_value = []

    # document surface
    connector.query_items.return_value = [{"id": "1", "type": "user"}]
    connector.read_item.return_value = {"id": "1", "pk": "p1"}
    connector.list_containers.return_value = [{"id": "users", "partitionKey": {"paths": ["/pk"]}}]

    connector.test_connection.return_value = {
        "server_version": "Microsoft SQL Server 2022",
        "account": getattr(config, "endpoint", None),
        "database": config.database
    }
    return connector


@pytest.fixture
def sql_config_data():
    """Raw SQL family configuration (backends A and B, no default)."""
    return copy.deepcopy(SQL_DATABASES)


@pytest.fixture
def cosmos_config_data():
    """Raw Cosmos family configuration (backends A and B, no default)."""
    return copy.deepcopy(COSMOS_DATABASES)


@pytest.fixture
def connector_factory():
    """Connector factory recording every connector it builds."""
    created = []

    def factory(config):
        connector = make_fake_connector(config)
        created.append(connector)
        return connector

    factory.created = created
    return factory


@pytest.fixture
def sql_manager(sql_config_data, connector_factory):
    """BackendManager over the SQL family config with fake connectors."""
    from core.config import GatewayConfig
    from database.manager import BackendManager

    gateway_config = GatewayConfig.from_dict(sql_config_data, "sql")
    return BackendManager(gateway_config, connector_factory=connector_factory)


@pytest.fixture
def cosmos_manager(cosmos_config_data, connector_factory):
    """BackendManager over the Cosmos family config with fake connectors."""
    from core.config import GatewayConfig
    from database.manager import BackendManager

    gateway_config = GatewayConfig.from_dict(cosmos_config_data, "cosmos")
    return BackendManager(gateway_config, connector_factory=connector_factory)
