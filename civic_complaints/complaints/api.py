from django.http import JsonResponse

from civic_portal.errors import InvalidInput
from civic_portal.http import JsonView, parse_json_body

from . import services
from .forms import ComplaintUpdateForm, ResponseForm, StatusTransitionForm
from .permissions import AdminRequiredMixin
from .serializers import serialize_complaint, serialize_response, serialize_stats


def parse_limit(value):
    if value in (None, ""):
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(errors={"limit": ["Limit must be a positive integer."]}) from exc
    if limit < 1:
        raise InvalidInput(errors={"limit": ["Limit must be a positive integer."]})
    return limit


class ComplaintCollectionAPIView(JsonView):
    def get(self, request):
        complaints = services.list_complaints(limit=parse_limit(request.GET.get("limit")))
        return JsonResponse([serialize_complaint(complaint) for complaint in complaints], safe=False)

    def post(self, request):
        if request.content_type and request.content_type.startswith("multipart/"):
            data = request.POST
            attachments = request.FILES.getlist("attachments")
        else:
            data = parse_json_body(request)
            attachments = ()
        complaint = services.create_complaint(data, user=request.user, attachments=attachments)
        return JsonResponse({"id": str(complaint.pk), "trackingId": complaint.tracking_id}, status=201)


class ComplaintDetailAPIView(AdminRequiredMixin, JsonView):
    admin_methods = ("patch", "delete")

    def get(self, request, complaint_id):
        complaint = services.get_complaint(complaint_id)
        return JsonResponse(serialize_complaint(complaint, history=True))

    def patch(self, request, complaint_id):
        form = ComplaintUpdateForm(parse_json_body(request))
        if not form.is_valid():
            raise InvalidInput.from_form(form)
        complaint = services.update_complaint(
            complaint_id,
            status=form.cleaned_data["status"] or None,
            response=form.cleaned_data["response"].strip() or None,
            respondent=request.user,
        )
        return JsonResponse(serialize_complaint(complaint, history=True))

    def delete(self, request, complaint_id):
        services.delete_complaint(complaint_id)
        return JsonResponse({"success": True})


class TrackComplaintAPIView(JsonView):
    def get(self, request):
        tracking_id = request.GET.get("trackingId") or request.GET.get("id")
        if not tracking_id or not tracking_id.strip():
            raise InvalidInput(errors={"trackingId": ["Tracking ID is required"]}, message="Tracking ID is required")
        complaint = services.lookup(tracking_id)
        return JsonResponse(serialize_complaint(complaint, history=True))


class ComplaintStatsAPIView(JsonView):
    def get(self, request):
        return JsonResponse(serialize_stats(services.complaint_stats()))


class AdminComplaintListAPIView(AdminRequiredMixin, JsonView):
    def get(self, request):
        filters = services.ComplaintFilters.from_query(request.GET)
        complaints = services.list_complaints(filters, limit=parse_limit(request.GET.get("limit")))
        return JsonResponse(
            {
                "complaints": [serialize_complaint(complaint) for complaint in complaints],
                "count": len(complaints),
                "stats": serialize_stats(services.complaint_stats()),
            }
        )


class AdminComplaintDetailAPIView(AdminRequiredMixin, JsonView):
    def get(self, request, complaint_id):
        complaint = services.get_complaint(complaint_id)
        return JsonResponse(
            {
                **serialize_complaint(complaint, history=True),
                "allowedTransitions": list(services.allowed_transitions(complaint.status)),
            }
        )


class AdminComplaintStatusAPIView(AdminRequiredMixin, JsonView):
    def post(self, request, complaint_id):
        form = StatusTransitionForm(parse_json_body(request))
        if not form.is_valid():
            raise InvalidInput.from_form(form)
        services.transition_status(complaint_id, form.cleaned_data["status"], form.cleaned_data["note"])
        return JsonResponse(serialize_complaint(services.get_complaint(complaint_id), history=True))


class AdminComplaintResponseAPIView(AdminRequiredMixin, JsonView):
    def post(self, request, complaint_id):
        form = ResponseForm(parse_json_body(request))
        if not form.is_valid():
            raise InvalidInput.from_form(form)
        response = services.respond(complaint_id, request.user, form.cleaned_data["message"])
        if form.cleaned_data["status"]:
            services.transition_status(complaint_id, form.cleaned_data["status"], form.cleaned_data["note"])
        return JsonResponse(serialize_response(response), status=201)
