"""Async relational connectors with connection pooling."""

from typing import Any, Dict, List, Optional
import logging

try:
    import aioodbc
except ImportError:
    aioodbc = None

try:
    import asyncpg
except ImportError:
    asyncpg = None

from core.config import SqlBackendConfig
from core.exceptions import BackendOperationError
from database.connectors import RelationalConnector, driver_error_message

logger = logging.getLogger(__name__)


MSSQL_TABLES_QUERY = """
    SELECT
        TABLE_SCHEMA,
        TABLE_NAME,
        TABLE_TYPE
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_SCHEMA, TABLE_NAME
"""

MSSQL_DESCRIBE_QUERY = """
    SELECT
        COLUMN_NAME,
        DATA_TYPE,
        CHARACTER_MAXIMUM_LENGTH,
        IS_NULLABLE,
        COLUMN_DEFAULT,
        ORDINAL_POSITION
    FROM INFORMATION_SCHEMA.COLUMNS
    WHERE TABLE_NAME = ?
    ORDER BY ORDINAL_POSITION
"""

POSTGRESQL_TABLES_QUERY = """
    SELECT
        table_schema AS "TABLE_SCHEMA",
        table_name AS "TABLE_NAME",
        table_type AS "TABLE_TYPE"
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
      AND table_schema NOT IN ('pg_catalog', 'information_schema')
    ORDER BY table_schema, table_name
"""

POSTGRESQL_DESCRIBE_QUERY = """
    SELECT
        column_name AS "COLUMN_NAME",
        data_type AS "DATA_TYPE",
        character_maximum_length AS "CHARACTER_MAXIMUM_LENGTH",
        is_nullable AS "IS_NULLABLE",
        column_default AS "COLUMN_DEFAULT",
        ordinal_position AS "ORDINAL_POSITION"
    FROM information_schema.columns
    WHERE table_name = $1
    ORDER BY ordinal_position
"""


def _rows_affected(status: Optional[str]) -> List[int]:
    # Status looks like "INSERT 0 3" or "UPDATE 2"; scripts report the last command
    last = status.split()[-1] if status else ""
    return [int(last)] if last.isdigit() else []


class MSSQLConnector(RelationalConnector):
    """Async SQL Server connector using aioodbc with connection pooling."""

    def __init__(self, config: SqlBackendConfig, pool_size: int = 10, command_timeout: int = 60):
        super().__init__(config)
        if aioodbc is None:
            raise ImportError("aioodbc is required for async SQL Server connections")
        self.pool_size = pool_size
        self.command_timeout = command_timeout
        self._pool = None

    async def open(self):
        """Initialize aioodbc connection pool."""
        try:
            self._pool = await aioodbc.create_pool(
                dsn=self.config.get_connection_string(),
                minsize=1,
                maxsize=self.pool_size,
                autocommit=True,
                timeout=self.command_timeout
            )
        except Exception as e:
            logger.debug(f"Failed to initialize MSSQL pool for '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

        self._opened = True
        logger.debug(f"MSSQL connection pool for '{self.name}' initialized (size: {self.pool_size})")

    async def _run(self, statement: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        self._require_open()
        try:
            async with self._pool.acquire() as conn:
                async with conn.cursor() as cursor:
                    await cursor.execute(statement, params or [])

                    rows: List[Dict[str, Any]] = []
                    columns: List[str] = []
                    if cursor.description:
                        columns = [desc[0] for desc in cursor.description]
                        fetched = await cursor.fetchall()
                        rows = [dict(zip(columns, row)) for row in fetched]

                    return {
                        "columns": columns,
                        "rows": rows,
                        "rows_affected": [cursor.rowcount] if cursor.rowcount >= 0 else []
                    }
        except Exception as e:
            logger.debug(f"Query error on '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

    async def execute_query(self, query: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        result = await self._run(query, params)
        return {"columns": result["columns"], "rows": result["rows"]}

    async def execute_command(self, command: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        result = await self._run(command, params)
        return {"rows_affected": result["rows_affected"], "rows": result["rows"]}

    async def list_tables(self) -> List[Dict[str, Any]]:
        return (await self._run(MSSQL_TABLES_QUERY))["rows"]

    async def describe_table(self, table: str) -> List[Dict[str, Any]]:
        return (await self._run(MSSQL_DESCRIBE_QUERY, [table]))["rows"]

    async def test_connection(self) -> Dict[str, Any]:
        """Test SQL Server connection."""
        result = await self._run("SELECT @@VERSION AS version")
        version = result["rows"][0]["version"] if result["rows"] else "Unknown"
        return {
            "server_version": version,
            "server": self.config.server,
            "port": self.config.port,
            "database": self.config.database
        }

    async def close(self):
        """Close connection pool."""
        if self._pool:
            self._pool.close()
            await self._pool.wait_closed()
            self._pool = None
            logger.debug(f"MSSQL connection pool for '{self.name}' closed")
        self._opened = False


class PostgreSQLConnector(RelationalConnector):
    """Async PostgreSQL connector using asyncpg with connection pooling."""

    def __init__(self, config: SqlBackendConfig, pool_size: int = 10, command_timeout: int = 60):
        super().__init__(config)
        if asyncpg is None:
            raise ImportError("asyncpg is required for async PostgreSQL connections")
        self.pool_size = pool_size
        self.command_timeout = command_timeout
        self._pool = None

    async def open(self):
        """Initialize asyncpg connection pool."""
        try:
            self._pool = await asyncpg.create_pool(
                host=self.config.server,
                port=self.config.port,
                user=self.config.user,
                password=self.config.password,
                database=self.config.database,
                min_size=1,
                max_size=self.pool_size,
                command_timeout=self.command_timeout,
                timeout=self.config.options.connect_timeout,
                ssl="require" if self.config.options.encrypt else "prefer"
            )
        except Exception as e:
            logger.debug(f"Failed to initialize PostgreSQL pool for '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

        self._opened = True
        logger.debug(f"PostgreSQL connection pool for '{self.name}' initialized (size: {self.pool_size})")

    async def _run(self, statement: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        self._require_open()
        try:
            async with self._pool.acquire() as conn:
                prepared = await conn.prepare(statement)
                records = await prepared.fetch(*(params or []))
                columns = [attr.name for attr in prepared.get_attributes()]
                return {
                    "columns": columns,
                    "rows": [dict(record) for record in records],
                    "rows_affected": _rows_affected(prepared.get_statusmsg())
                }
        except Exception as e:
            logger.debug(f"Query error on '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

    async def _run_script(self, script: str) -> Dict[str, Any]:
        """Run statement text through the simple query protocol.

        Prepared statements hold a single command; scripts with several
        statements only go through ``Connection.execute`` without arguments.
        """
        self._require_open()
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute(script)
        except Exception as e:
            logger.debug(f"Command error on '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e
        return {"rows_affected": _rows_affected(status), "rows": []}

    async def execute_query(self, query: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        result = await self._run(query, params)
        return {"columns": result["columns"], "rows": result["rows"]}

    async def execute_command(self, command: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        if not params:
            return await self._run_script(command)
        result = await self._run(command, params)
        return {"rows_affected": result["rows_affected"], "rows": result["rows"]}

    async def list_tables(self) -> List[Dict[str, Any]]:
        return (await self._run(POSTGRESQL_TABLES_QUERY))["rows"]

    async def describe_table(self, table: str) -> List[Dict[str, Any]]:
        return (await self._run(POSTGRESQL_DESCRIBE_QUERY, [table]))["rows"]

    async def test_connection(self) -> Dict[str, Any]:
        """Test PostgreSQL connection."""
        result = await self._run("SELECT version() AS version")
        version = result["rows"][0]["version"] if result["rows"] else "Unknown"
        return {
            "server_version": version,
            "server": self.config.server,
            "port": self.config.port,
            "database": self.config.database
        }

    async def close(self):
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.debug(f"PostgreSQL connection pool for '{self.name}' closed")
        self._opened = False
