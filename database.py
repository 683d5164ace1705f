"""
database.py - Read-only access to MySQL server status

Each scrape opens its own connection through a NullPool engine and closes
it when the scrape ends; nothing is reused across scrapes.
"""
import re
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple
from urllib.parse import parse_qsl

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from config import ConfigurationError, settings
from logger import get_logger

logger = get_logger(__name__)

GLOBAL_STATUS_QUERY = "SHOW GLOBAL STATUS"
SLAVE_STATUS_QUERY = "SHOW SLAVE STATUS"

# user:password@tcp(host:port)/dbname?param=value
_GO_DSN = re.compile(
    r'^(?:(?P<user>[^:@/]*)(?::(?P<password>.*))?@)?'
    r'(?:(?P<net>tcp|unix)\((?P<addr>[^)]*)\))?'
    r'/(?P<database>[^?]*)'
    r'(?:\?(?P<params>.*))?$'
)


class ScrapeError(Exception):
    """Raised when a status query cannot be completed"""

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"error {stage}: {cause}")


def data_source_to_url(data_source_name: str) -> URL:
    """
    Build a SQLAlchemy URL from a data source name.

    Accepts SQLAlchemy URLs as-is and converts the Go driver form
    ``user:password@tcp(host:3306)/dbname`` (or ``unix(/path.sock)``) into
    a ``mysql+pymysql`` URL.
    """
    if "://" in data_source_name:
        try:
            return make_url(data_source_name)
        except ArgumentError as e:
            raise ConfigurationError(f"Invalid data source name: {e}") from e

    match = _GO_DSN.match(data_source_name)
    if not match:
        raise ConfigurationError("Invalid data source name: expected user:password@tcp(host:port)/dbname")

    host, port, query = None, None, {}
    addr = match.group("addr") or ""
    if match.group("net") == "unix":
        query["unix_socket"] = addr
    elif addr:
        host, sep, port_text = addr.rpartition(":")
        if not sep:
            host, port_text = port_text, ""
        host = host.strip("[]") or None
        port = int(port_text) if port_text.isdigit() else None

    # Go driver options have no pymysql equivalent; they are ignored
    ignored = [key for key, _ in parse_qsl(match.group("params") or "")]
    if ignored:
        logger.debug(f"Ignoring data source options: {', '.join(ignored)}")

    return URL.create(
        "mysql+pymysql",
        username=match.group("user") or None,
        password=match.group("password") or None,
        host=host,
        port=port,
        database=match.group("database") or None,
        query=query,
    )


class StatusSource:
    """
    Runs the two status statements against a MySQL server.

    Example:
        source = StatusSource("root:secret@tcp(localhost:3306)/")
        with source.connect() as conn:
            for name, value in source.global_status(conn):
                ...
            columns = source.slave_status(conn)
    """

    def __init__(self, data_source_name: str, timeout: Optional[int] = None):
        self.url = data_source_to_url(data_source_name)
        self.timeout = timeout or settings.get('scrape_timeout', 10)
        self.is_mysql = self.url.get_backend_name() == "mysql"

        connect_args = {}
        if self.is_mysql:
            connect_args = {
                "connect_timeout": self.timeout,
                "read_timeout": self.timeout,
                "write_timeout": self.timeout,
            }

        self.engine = create_engine(
            self.url,
            poolclass=NullPool,
            echo=settings.get('debug', False),
            connect_args=connect_args
        )

        logger.info(f"Status source configured for {self.url.render_as_string(hide_password=True)}")

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Open a connection for one scrape"""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as e:
            raise ScrapeError("opening connection to database", e) from e

        try:
            yield conn
        finally:
            conn.close()

    def global_status(self, conn: Connection) -> Iterator[Tuple[str, str]]:
        """Stream (name, value) rows of SHOW GLOBAL STATUS"""
        try:
            result = conn.execution_options(stream_results=True).execute(text(GLOBAL_STATUS_QUERY))
        except SQLAlchemyError as e:
            raise ScrapeError("running status query on database", e) from e

        try:
            for row in result:
                yield _decode(row[0]), _decode(row[1])
        except (SQLAlchemyError, UnicodeDecodeError, IndexError) as e:
            raise ScrapeError("getting result set", e) from e
        finally:
            result.close()

    def slave_status(self, conn: Connection) -> List[Tuple[str, object]]:
        """
        Return (column, raw value) pairs of SHOW SLAVE STATUS.

        The column set depends on server version, so it is read from the
        result set rather than hardcoded. A server that is not a replica
        returns no rows and yields an empty list. With several rows
        (multi-source replication) the last row wins.
        """
        try:
            result = conn.execute(text(SLAVE_STATUS_QUERY))
        except SQLAlchemyError as e:
            raise ScrapeError("running show slave query on database", e) from e

        try:
            columns = list(result.keys())
        except SQLAlchemyError as e:
            raise ScrapeError("retrieving column list", e) from e

        try:
            rows = result.fetchall()
        except SQLAlchemyError as e:
            raise ScrapeError("retrieving result set", e) from e
        finally:
            result.close()

        if not rows:
            return []

        return list(zip(columns, rows[-1]))

    def close(self):
        """Dispose of the engine"""
        self.engine.dispose()


def _decode(value) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return "" if value is None else str(value)
