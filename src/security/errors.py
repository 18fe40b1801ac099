class VerificationError(Exception):
    """Base error for failed verification requests.

    Carries the canonical status used by Firebase callable functions and the
    HTTP status it is rendered with.
    """
    status = 'INTERNAL'
    http_status = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'status': self.status, 'message': self.message}

class Unauthenticated(VerificationError):
    status = 'UNAUTHENTICATED'
    http_status = 401

class InvalidArgument(VerificationError):
    status = 'INVALID_ARGUMENT'
    http_status = 400

class NotFound(VerificationError):
    status = 'NOT_FOUND'
    http_status = 404

class FailedPrecondition(VerificationError):
    status = 'FAILED_PRECONDITION'
    http_status = 400

class DeadlineExceeded(VerificationError):
    status = 'DEADLINE_EXCEEDED'
    http_status = 504

class PermissionDenied(VerificationError):
    status = 'PERMISSION_DENIED'
    http_status = 403

class AlreadyExists(VerificationError):
    status = 'ALREADY_EXISTS'
    http_status = 409
