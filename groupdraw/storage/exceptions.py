"""
Exceptions raised by the draw storage backends.

Every backend wraps driver errors into one of these so the service layer can
treat SQLite, Turso and Supabase failures the same way.
"""


class DatabaseError(Exception):
    """Base exception for all storage errors."""
    pass


class ConnectionError(DatabaseError):
    """The backend could not be reached."""
    pass


class ConfigurationError(DatabaseError):
    """DB_TYPE or backend credentials are missing or invalid."""
    pass


class SchemaError(DatabaseError):
    """The draws table could not be created."""
    pass


class QueryError(DatabaseError):
    """Reading or writing a draw failed."""
    pass
