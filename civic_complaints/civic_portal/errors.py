"""Error taxonomy shared by the complaint and account services.

Services raise these; JSON views turn them into responses with
:func:`error_response`, HTML views re-render their forms instead.
"""

from django.http import JsonResponse


class PortalError(Exception):
    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)

    def as_dict(self):
        return {"error": self.message}


class InvalidInput(PortalError):
    status_code = 400
    message = "Invalid input."

    def __init__(self, errors=None, message=None, form=None):
        super().__init__(message)
        self.errors = errors or {}
        self.form = form

    @classmethod
    def from_form(cls, form):
        errors = {field: [str(error) for error in field_errors] for field, field_errors in form.errors.items()}
        return cls(errors=errors, form=form)

    def as_dict(self):
        return {"error": self.message, "errors": self.errors}


class NotFound(PortalError):
    status_code = 404
    message = "Not found."


class Conflict(PortalError):
    status_code = 409
    message = "Conflict."


class StoreUnavailable(PortalError):
    status_code = 500
    message = "The service is temporarily unavailable. Please try again later."


def error_response(exc: PortalError) -> JsonResponse:
    return JsonResponse(exc.as_dict(), status=exc.status_code)
