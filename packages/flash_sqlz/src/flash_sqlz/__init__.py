from .client import DBClient, quote_identifier, render_statement
from .config import SQLZSettings, sqlz_settings
from .db import build_url, connect, connect_from_settings, create_db_engine
from .exceptions import (
    CommitError,
    ConfigurationError,
    ExecutionError,
    FlashSQLZError,
    MaterializationError,
    MissingPayloadError,
    MissingTableError,
    RollbackError,
    StatementKindError,
    TransactionError,
    UnsupportedPayloadError,
)
from .executor import Executor, QueryResult, SQLAlchemyExecutor
from .info import BuilderState, RenderedStatement, StatementInfo, StatementKind
from .logging import get_logger, setup_logging
from .materializer import Materializer, PydanticMaterializer
from .payload import FieldList, Payload, TaggedRecord, as_payload, column

__all__ = [
    "BuilderState",
    "CommitError",
    "ConfigurationError",
    "DBClient",
    "ExecutionError",
    "Executor",
    "FieldList",
    "FlashSQLZError",
    "MaterializationError",
    "Materializer",
    "MissingPayloadError",
    "MissingTableError",
    "Payload",
    "PydanticMaterializer",
    "QueryResult",
    "RenderedStatement",
    "RollbackError",
    "SQLAlchemyExecutor",
    "SQLZSettings",
    "StatementInfo",
    "StatementKind",
    "StatementKindError",
    "TaggedRecord",
    "TransactionError",
    "UnsupportedPayloadError",
    "as_payload",
    "build_url",
    "column",
    "connect",
    "connect_from_settings",
    "create_db_engine",
    "get_logger",
    "quote_identifier",
    "render_statement",
    "setup_logging",
    "sqlz_settings",
]
