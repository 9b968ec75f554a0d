"""
Typed exception hierarchy for the site-operations import pipeline.

Field-level problems in an uploaded file are never raised; they are
collected as ``ValidationError`` values on each parsed row.  The classes
below cover operational failures only: a bad table registry, a request
missing its context, a blocked wizard transition, a failed round trip to
the server, or a write the database refused.

Every class carries a machine-readable ``code`` class attribute so callers
and API layers can branch on type or code rather than on message text.

    SiteOpsError (base)
    |
    +-- ConfigurationError
    |   +-- UnknownEntityError
    |   +-- InvalidTableConfigError
    |   +-- MissingContextError
    |
    +-- WizardError
    |   +-- WizardTransitionError
    |   +-- RowNotFoundError
    |
    +-- TransportError
    |
    +-- PersistenceError
        +-- RecordWriteError
"""


class SiteOpsError(Exception):
    """
    Base exception for all site-operations errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "SITEOPS_ERROR"


# Configuration


class ConfigurationError(SiteOpsError):
    """Base exception for registry and request-context errors."""

    code: str = "CONFIGURATION_ERROR"


class UnknownEntityError(ConfigurationError):
    """Entity is not registered, or is registered without any fields."""

    code: str = "UNKNOWN_ENTITY"

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"Unknown or non-importable entity: {entity}")


class InvalidTableConfigError(ConfigurationError):
    """A table definition in the registry document is malformed."""

    code: str = "INVALID_TABLE_CONFIG"

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(f"Invalid table config '{entity}': {reason}")


class MissingContextError(ConfigurationError):
    """The entity needs a context value (usually a site) that was not given."""

    code: str = "MISSING_CONTEXT"

    def __init__(self, entity: str, missing: str):
        self.entity = entity
        self.missing = missing
        super().__init__(f"Entity '{entity}' requires {missing}")


# Wizard


class WizardError(SiteOpsError):
    """Base exception for wizard session errors."""

    code: str = "WIZARD_ERROR"


class WizardTransitionError(WizardError):
    """The requested step transition is not allowed from the current state."""

    code: str = "WIZARD_TRANSITION_BLOCKED"

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(f"Cannot leave step '{step}': {reason}")


class RowNotFoundError(WizardError):
    """No parsed row carries the given row number."""

    code: str = "ROW_NOT_FOUND"

    def __init__(self, row_number: int):
        self.row_number = row_number
        super().__init__(f"Row not found: {row_number}")


# Transport


class TransportError(SiteOpsError):
    """A validate or import round trip failed before producing an answer."""

    code: str = "TRANSPORT_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


# Persistence


class PersistenceError(SiteOpsError):
    """Base exception for destination-store errors."""

    code: str = "PERSISTENCE_ERROR"


class RecordWriteError(PersistenceError):
    """The destination store rejected a batch or a single record."""

    code: str = "RECORD_WRITE_FAILED"

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(f"Write to '{entity}' failed: {reason}")
