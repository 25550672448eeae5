"""
Platform-wide exception hierarchy.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes and error codes everywhere.

Usage:
    from maintenancehub.core.exceptions import NotFoundError, PhaseIncompleteError

    raise NotFoundError(resource="ClientCompany", resource_id=42)
    raise PhaseIncompleteError(phase=3, progress=75)
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist within the given scope.

    Used for BOTH genuinely missing records AND cross-tenant access attempts,
    so a caller cannot probe for records owned by another tenant.

    Args:
        resource: Human-readable model/entity name (e.g. "ClientCompany").
        resource_id: The key that was looked up. Included in logs, not in HTTP response.
        tenant_id: Optional — the scope that was enforced. For debug logging only.
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        tenant_id: int | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.tenant_id = tenant_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        if tenant_id is not None:
            msg += f" (tenant={tenant_id})"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails business-rule validation in the service layer.

    Distinct from HTTP 400 (malformed input, caught in blueprint) — this
    exception signals that the data was well-formed but violated a business
    rule. Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    code = "ERR_VALIDATION_CONSTRAINT"

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class PhaseIncompleteError(ValidationError):
    """Raised when a phase is marked complete while its checklist is below 100%.

    The percentage is always recomputed from the catalog and the stored
    checklist before this check, never taken from the client.
    """

    code = "ERR_PHASE_INCOMPLETE"
    kind = "phase_incomplete"

    def __init__(self, phase: int, progress: int) -> None:
        self.phase = phase
        self.progress = progress
        super().__init__(
            f"Phase {phase} is only {progress}% complete; "
            "all checklist items must be done before completing the phase",
            details={"phase": phase, "progress": progress, "kind": self.kind},
        )


class ConflictError(Exception):
    """Raised when an operation would create a duplicate unique constraint violation.

    Maps to HTTP 409.
    """

    code = "ERR_CONFLICT_DUPLICATE"

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class InvalidTransitionError(Exception):
    """Raised when a lifecycle action is not allowed from the current state.

    Maps to HTTP 409.
    """

    code = "ERR_CONFLICT_STATE"

    def __init__(self, action: str, current: str, reason: str | None = None) -> None:
        msg = f"Cannot '{action}' from state '{current}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.action = action
        self.current_state = current


class StaleRecordError(Exception):
    """Raised when a write carries an expected_version that is no longer current.

    Maps to HTTP 409. Only raised when the caller opts in by sending a version.
    """

    code = "ERR_CONFLICT_VERSION"

    def __init__(self, resource: str, expected: int, actual: int) -> None:
        self.resource = resource
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{resource} was modified concurrently (expected version {expected}, found {actual})"
        )
