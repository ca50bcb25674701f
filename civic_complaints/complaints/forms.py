from pathlib import Path

from django import forms
from django.core.exceptions import ValidationError

from .models import Complaint

ALLOWED_ATTACHMENT_EXTENSIONS = {".jpg", ".jpeg", ".png", ".pdf"}
MAX_ATTACHMENT_SIZE_BYTES = 5 * 1024 * 1024

DATE_RANGE_CHOICES = [
    ("today", "Today"),
    ("week", "Last 7 days"),
    ("month", "Last 30 days"),
    ("year", "Last year"),
]


def validate_attachment(file_obj):
    extension = Path(file_obj.name).suffix.lower()
    if extension not in ALLOWED_ATTACHMENT_EXTENSIONS:
        raise ValidationError("Only JPG, JPEG, PNG, and PDF files are allowed.")
    if file_obj.size > MAX_ATTACHMENT_SIZE_BYTES:
        raise ValidationError("Each file must be 5MB or smaller.")


def with_blank(choices, label="All"):
    return [("", label)] + list(choices)


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    widget = MultipleFileInput

    def clean(self, data, initial=None):
        if not data:
            return []
        if not isinstance(data, (list, tuple)):
            data = [data]
        cleaned_files = []
        errors = []
        for file_obj in data:
            try:
                cleaned_files.append(super().clean(file_obj, initial))
            except ValidationError as error:
                errors.extend(error.error_list)
        if errors:
            raise ValidationError(errors)
        return cleaned_files


class ComplaintForm(forms.ModelForm):
    class Meta:
        model = Complaint
        fields = ["title", "description", "category", "agency", "location", "name", "email", "phone"]
        widgets = {
            "title": forms.TextInput(attrs={"class": "form-control", "placeholder": "Brief complaint title"}),
            "description": forms.Textarea(attrs={"class": "form-control", "rows": 5}),
            "category": forms.Select(attrs={"class": "form-select"}),
            "agency": forms.Select(attrs={"class": "form-select"}),
            "location": forms.TextInput(attrs={"class": "form-control", "placeholder": "Location"}),
            "name": forms.TextInput(attrs={"class": "form-control"}),
            "email": forms.EmailInput(attrs={"class": "form-control"}),
            "phone": forms.TextInput(attrs={"class": "form-control"}),
        }

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class CitizenComplaintForm(ComplaintForm):
    """Intake form for the public submit page.

    The citizen does not pick a department; the agency is routed from the
    chosen category.
    """

    class Meta(ComplaintForm.Meta):
        fields = ["title", "description", "category", "location", "name", "email", "phone"]

    def to_submission(self):
        data = dict(self.cleaned_data)
        data["agency"] = Complaint.agency_for_category(data["category"])
        return data


class MultipleAttachmentForm(forms.Form):
    attachments = MultipleFileField(
        required=False,
        widget=MultipleFileInput(
            attrs={
                "class": "form-control",
                "accept": ".jpg,.jpeg,.png,.pdf",
            }
        ),
    )

    def clean_attachments(self):
        files = self.cleaned_data.get("attachments", [])
        for file_obj in files:
            validate_attachment(file_obj)
        return files


class StatusTransitionForm(forms.Form):
    status = forms.ChoiceField(
        choices=Complaint.Status.choices,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    note = forms.CharField(
        required=False,
        widget=forms.Textarea(
            attrs={
                "class": "form-control",
                "rows": 3,
                "placeholder": "Add a note about this status change",
            }
        ),
    )

    def __init__(self, *args, **kwargs):
        # Restricts the offered targets only; the service accepts any status.
        offered = kwargs.pop("offered_statuses", None)
        super().__init__(*args, **kwargs)
        if offered is not None:
            self.fields["status"].choices = [
                (value, label) for value, label in Complaint.Status.choices if value in offered
            ]


class ResponseForm(forms.Form):
    message = forms.CharField(
        widget=forms.Textarea(
            attrs={
                "class": "form-control",
                "rows": 4,
                "placeholder": "Write a response to the citizen",
            }
        ),
        error_messages={"required": "Response message is required."},
    )
    status = forms.ChoiceField(
        required=False,
        choices=with_blank(Complaint.Status.choices, label="Keep current status"),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    note = forms.CharField(required=False, widget=forms.TextInput(attrs={"class": "form-control"}))


class ComplaintUpdateForm(forms.Form):
    status = forms.ChoiceField(required=False, choices=with_blank(Complaint.Status.choices))
    response = forms.CharField(required=False)
    responseDate = forms.DateTimeField(required=False)


class ComplaintFilterForm(forms.Form):
    status = forms.ChoiceField(
        required=False,
        choices=with_blank(Complaint.Status.choices),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    category = forms.ChoiceField(
        required=False,
        choices=with_blank(Complaint.Category.choices),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    agency = forms.ChoiceField(
        required=False,
        choices=with_blank(Complaint.Agency.choices),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    date_range = forms.ChoiceField(
        required=False,
        choices=with_blank(DATE_RANGE_CHOICES, label="Any time"),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    search = forms.CharField(
        required=False,
        max_length=255,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Title, description, tracking ID or location"}),
    )

    @classmethod
    def from_query(cls, params):
        """Bind query parameters, accepting the camelCase names used by the API."""
        data = {
            "status": params.get("status", ""),
            "category": params.get("category", ""),
            "agency": params.get("agency", ""),
            "date_range": params.get("date_range", params.get("dateRange", "")),
            "search": params.get("search", params.get("q", "")),
        }
        return cls(data)
