from pathlib import Path

from django.conf import settings
from django.contrib import messages
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views import View
from django.views.generic import ListView, TemplateView

from civic_portal.errors import InvalidInput, NotFound, PortalError

from . import services
from .forms import (
    ALLOWED_ATTACHMENT_EXTENSIONS,
    CitizenComplaintForm,
    ComplaintFilterForm,
    MultipleAttachmentForm,
    ResponseForm,
    StatusTransitionForm,
)
from .models import Attachment, Complaint
from .permissions import AdminRequiredMixin


class HomeView(TemplateView):
    template_name = "home.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["stats"] = services.complaint_stats()
        context["recent_complaints"] = services.list_complaints(limit=settings.RECENT_COMPLAINTS_LIMIT)
        return context


class ComplaintSubmitView(View):
    template_name = "complaints/complaint_submit.html"

    def get(self, request):
        context = {
            "form": CitizenComplaintForm(),
            "attachment_form": MultipleAttachmentForm(),
        }
        return render(request, self.template_name, context)

    def post(self, request):
        form = CitizenComplaintForm(request.POST)
        attachment_form = MultipleAttachmentForm(request.POST, request.FILES)
        if form.is_valid() and attachment_form.is_valid():
            try:
                complaint = services.create_complaint(
                    form.to_submission(),
                    user=request.user,
                    attachments=attachment_form.cleaned_data["attachments"],
                )
            except PortalError as exc:
                form.add_error(None, exc.message)
            else:
                messages.success(
                    request,
                    f"Complaint submitted successfully. Your tracking ID is {complaint.tracking_id}",
                )
                return redirect(f"{reverse('complaints:complaint_track')}?trackingId={complaint.tracking_id}")

        return render(
            request,
            self.template_name,
            {
                "form": form,
                "attachment_form": attachment_form,
            },
        )


class TrackComplaintView(TemplateView):
    template_name = "complaints/complaint_track.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        tracking_id = services.normalize_tracking_id(self.request.GET.get("trackingId"))
        context["tracking_id"] = tracking_id
        context["complaint"] = None
        context["not_found"] = False
        context["error"] = None
        if tracking_id:
            try:
                context["complaint"] = services.lookup(tracking_id)
            except NotFound:
                context["not_found"] = True
            except PortalError as exc:
                context["error"] = exc.message
        return context


class AdminDashboardView(AdminRequiredMixin, ListView):
    template_name = "complaints/admin_dashboard.html"
    context_object_name = "complaints"
    paginate_by = 20

    def get_filter_form(self):
        if not hasattr(self, "_filter_form"):
            self._filter_form = ComplaintFilterForm.from_query(self.request.GET)
        return self._filter_form

    def get_queryset(self):
        form = self.get_filter_form()
        if not form.is_valid():
            return Complaint.objects.none()
        filters = services.ComplaintFilters.from_form(form)
        return services.apply_complaint_filters(Complaint.objects.all(), filters).order_by("-created_at")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["filter_form"] = self.get_filter_form()
        context["stats"] = services.complaint_stats()
        return context


class AdminComplaintDetailView(AdminRequiredMixin, TemplateView):
    template_name = "complaints/admin_complaint_detail.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        try:
            complaint = services.get_complaint(self.kwargs["complaint_id"])
        except NotFound as exc:
            raise Http404(exc.message) from exc
        offered = services.allowed_transitions(complaint.status)
        context["complaint"] = complaint
        context["allowed_transitions"] = offered
        if offered:
            context["status_form"] = StatusTransitionForm(
                offered_statuses=offered,
                initial={"status": offered[0]},
            )
        context["response_form"] = ResponseForm()
        return context


class AdminComplaintStatusView(AdminRequiredMixin, View):
    def post(self, request, complaint_id):
        form = StatusTransitionForm(request.POST)
        if form.is_valid():
            try:
                services.transition_status(complaint_id, form.cleaned_data["status"], form.cleaned_data["note"])
            except NotFound as exc:
                raise Http404(exc.message) from exc
            messages.success(request, "Complaint status updated successfully.")
        else:
            for field, field_errors in form.errors.items():
                for error in field_errors:
                    messages.error(request, f"{field}: {error}")
        return redirect("complaints:admin_complaint_detail", complaint_id=complaint_id)

    def get(self, request, complaint_id):
        return redirect("complaints:admin_complaint_detail", complaint_id=complaint_id)


class AdminComplaintResponseView(AdminRequiredMixin, View):
    def post(self, request, complaint_id):
        form = ResponseForm(request.POST)
        if form.is_valid():
            try:
                services.respond(complaint_id, request.user, form.cleaned_data["message"])
                if form.cleaned_data["status"]:
                    services.transition_status(complaint_id, form.cleaned_data["status"], form.cleaned_data["note"])
            except NotFound as exc:
                raise Http404(exc.message) from exc
            except InvalidInput as exc:
                for field_errors in exc.errors.values():
                    for error in field_errors:
                        messages.error(request, error)
            else:
                messages.success(request, "Response posted successfully.")
        else:
            for field_errors in form.errors.values():
                for error in field_errors:
                    messages.error(request, error)
        return redirect("complaints:admin_complaint_detail", complaint_id=complaint_id)

    def get(self, request, complaint_id):
        return redirect("complaints:admin_complaint_detail", complaint_id=complaint_id)


class AttachmentDownloadView(AdminRequiredMixin, View):
    def get(self, request, attachment_id):
        attachment = get_object_or_404(Attachment.objects.select_related("complaint"), pk=attachment_id)
        if not attachment.file:
            raise Http404("File not found.")

        filename = attachment.original_filename or attachment.file.name.rsplit("/", maxsplit=1)[-1]
        inline = request.GET.get("inline") == "1" and Path(filename).suffix.lower() in ALLOWED_ATTACHMENT_EXTENSIONS
        return FileResponse(
            attachment.file.open("rb"),
            as_attachment=not inline,
            filename=filename,
        )
