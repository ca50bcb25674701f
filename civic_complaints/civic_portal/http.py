import json

from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .errors import InvalidInput, PortalError, error_response


def parse_json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidInput(message="Request body must be valid JSON.") from exc
    if not isinstance(payload, dict):
        raise InvalidInput(message="Request body must be a JSON object.")
    return payload


class JsonView(View):
    """Base view for the JSON API.

    Handlers return a ``JsonResponse``; any :class:`PortalError` they raise is
    turned into the matching status code and error body.

    Public endpoints are CSRF-exempt. Views that set ``enforce_csrf`` (the
    session-authenticated admin endpoints) expect the ``X-CSRFToken`` header.
    """

    enforce_csrf = False

    @classmethod
    def as_view(cls, **initkwargs):
        view = super().as_view(**initkwargs)
        if cls.enforce_csrf:
            return view
        return csrf_exempt(view)

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except PortalError as exc:
            return error_response(exc)
