class ServiceError(RuntimeError):
    """Recoverable service error surfaced to the caller as a JSON error."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidInput(ServiceError):
    status_code = 400


class Unauthenticated(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class PersistenceError(ServiceError):
    status_code = 500
