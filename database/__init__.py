from .connection import (
    ForumDB,
    database,
    drop_schema,
    ensure_schema,
    existing_tables,
    get_forum_db,
)
from .errors import (
    Duplicate,
    ForumError,
    IntegrityDefect,
    InvalidOperation,
    NotFound,
    SchemaError,
)
from .tables import TableNames
