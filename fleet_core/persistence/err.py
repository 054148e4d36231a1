"""
Fleet core persistence exceptions
"""


class PersistenceError(Exception):
    """
    Base class for all problems raised by the record repository
    """


class RepositoryError(PersistenceError):
    """
    Exception raised when the underlying store failed to complete an operation
    """


class InvalidRecord(PersistenceError):
    """
    Exception raised when a record would violate the field constraints (e.g. empty required fields)
    """


class MalformedIdentifier(PersistenceError):
    """
    Exception raised when an identifier can't address any record at all
    """
