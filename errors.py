"""
Error kinds surfaced by the roster operations.
Each error carries a stable `kind` string and the HTTP status the API layer answers with.
"""

VALIDATION = "VALIDATION"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
BUS_FULL = "BUS_FULL"
UNAUTHORIZED_SCOPE = "UNAUTHORIZED_SCOPE"


class RosterError(Exception):
    """Base class for every error a roster operation reports to its caller"""
    kind = None
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class ValidationError(RosterError):
    kind = VALIDATION
    status_code = 400


class NotFoundError(RosterError):
    kind = NOT_FOUND
    status_code = 404


class ConflictError(RosterError):
    kind = CONFLICT
    status_code = 409


class BusFullError(RosterError):
    """No free seat left on the bus (CAPACITY_EXCEEDED)"""
    kind = BUS_FULL
    status_code = 400

    def __init__(self, bus_no):
        super().__init__('Bus full')
        self.bus_no = bus_no


class UnauthorizedScopeError(RosterError):
    kind = UNAUTHORIZED_SCOPE
    status_code = 403
