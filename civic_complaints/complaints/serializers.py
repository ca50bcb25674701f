def _timestamp(value):
    return value.isoformat() if value else None


def serialize_timeline_event(event):
    return {
        "id": event.pk,
        "status": event.status,
        "note": event.note,
        "createdAt": _timestamp(event.created_at),
    }


def serialize_response(response):
    respondent = response.respondent
    return {
        "id": response.pk,
        "message": response.message,
        "createdAt": _timestamp(response.created_at),
        "respondent": {
            "id": respondent.pk,
            "name": respondent.display_name,
            "email": respondent.email,
        },
    }


def serialize_attachment(attachment):
    return {
        "id": attachment.pk,
        "filename": attachment.original_filename,
        "url": attachment.url,
    }


def serialize_complaint(complaint, history=False):
    data = {
        "id": str(complaint.pk),
        "trackingId": complaint.tracking_id,
        "title": complaint.title,
        "description": complaint.description,
        "category": complaint.category,
        "agency": complaint.agency,
        "location": complaint.location,
        "name": complaint.name,
        "email": complaint.email,
        "phone": complaint.phone,
        "status": complaint.status,
        "createdAt": _timestamp(complaint.created_at),
        "updatedAt": _timestamp(complaint.updated_at),
    }
    if history:
        data["timeline"] = [serialize_timeline_event(event) for event in complaint.timeline.all()]
        data["responses"] = [serialize_response(response) for response in complaint.responses.all()]
        data["attachments"] = [serialize_attachment(attachment) for attachment in complaint.attachments.all()]
    return data


def serialize_stats(stats):
    by_status = stats["by_status"]
    return {
        "total": stats["total"],
        "pending": by_status["PENDING"],
        "inProgress": by_status["IN_PROGRESS"],
        "resolved": by_status["RESOLVED"],
        "rejected": by_status["REJECTED"],
        "byStatus": by_status,
        "categories": stats["categories"],
    }
