class PortalError(Exception):
    """Errores de negocio lanzados desde crud/; main.py los convierte en JSON."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(PortalError):
    status_code = 404


class ValidationError(PortalError):
    status_code = 400


class InsufficientFloat(PortalError):
    status_code = 400


class InvalidState(PortalError):
    status_code = 409


class ConcurrencyConflict(PortalError):
    status_code = 409
