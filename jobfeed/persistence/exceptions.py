"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError. When one is raised
while a job is being stored, the importer marks that job as failed and moves
on to the next job.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """The database could not be initialized, reached or used.

    Also raised when a session is requested before init_database().
    """

    pass


class RecordNotFoundError(PersistenceError):
    """An update or delete targeted a feed or listing that does not exist.

    Lookups that may legitimately miss return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """A write violated a database constraint (unique feed name, unique term, ...)."""

    pass
