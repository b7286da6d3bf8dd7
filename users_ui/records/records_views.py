# users_ui/records/records_views.py
import logging

from django.conf import settings
from django.http import HttpResponse
from django.utils.translation import gettext as _
from django.views.decorators.http import require_GET, require_POST

from accounts.views import request_data, result_response
from core import helpers, mutations
from core.core_models import DateRange
from core.errors import NotFoundError, OperationResult, guarded
from utils.export_utils import export_records
from .base_views import session_view

logger = logging.getLogger(__name__)


def _filters_from_query(request) -> dict:
    return {
        name: request.GET.get(name, "").strip()
        for name in sorted(helpers.FILTERABLE_FIELDS)
        if request.GET.get(name, "").strip()
    }


def _date_range_from_query(request) -> DateRange:
    return DateRange(
        start=request.GET.get("date_from", "").strip() or None,
        end=request.GET.get("date_to", "").strip() or None,
    )


def _int_param(request, name, default):
    try:
        return max(int(request.GET.get(name, default)), 1)
    except (TypeError, ValueError):
        return default


# -------------------------------------------------------------------
# Read operations (guarded so failures become structured results)
# -------------------------------------------------------------------
@guarded
def _list_page(email, role, filters, date_range, page, per_page):
    records = helpers.list_records(email, role, filters, date_range)
    result = helpers.paginate(records, page, per_page)
    result["items"] = [r.to_dict() for r in result["items"]]
    return result


@guarded
def _record_detail(handle, email, role):
    view = helpers.get_record_view(handle, email, role)
    if view is None:
        raise NotFoundError(_("The record was not found. It may have been deleted."))
    return view.to_dict()


@guarded
def _summary():
    return helpers.get_summary_stats()


@guarded
def _export(email, role, filters, date_range, fmt):
    records = helpers.list_records(email, role, filters, date_range)
    if not records:
        raise NotFoundError(_("There are no records to export."))
    url = export_records(records, fmt=fmt, title_text=_("Training records"))
    if url is None:
        return OperationResult(success=False, message=_("The export could not be generated."), error="server")
    return {"url": url, "count": len(records)}


@require_GET
@session_view()
def records_list(request, email, role):
    result = _list_page(
        email, role,
        _filters_from_query(request),
        _date_range_from_query(request),
        _int_param(request, "page", 1),
        _int_param(request, "per_page", settings.RECORDS_DEFAULT_PER_PAGE),
    )
    return result_response(result)


@require_GET
@session_view()
def record_detail(request, email, role, handle):
    return result_response(_record_detail(handle, email, role))


@require_GET
@session_view()
def dropdown_options(request, email, role):
    try:
        blob = helpers.get_dropdown_options()
    except Exception:
        logger.exception("Building dropdown options failed")
        return result_response(OperationResult(success=False, message=_("A server error occurred. Please try again later."), error="server"))
    # Cached blob is already JSON; send it untouched
    return HttpResponse(blob, content_type="application/json")


@require_GET
@session_view()
def summary_stats(request, email, role):
    return result_response(_summary())


@require_GET
@session_view()
def export_view(request, email, role):
    fmt = request.GET.get("format", "xlsx").lower()
    return result_response(_export(
        email, role,
        _filters_from_query(request),
        _date_range_from_query(request),
        fmt if fmt in ("xlsx", "pdf") else "xlsx",
    ))


# -------------------------------------------------------------------
# Mutations (Admin)
# -------------------------------------------------------------------
@require_POST
@session_view(admin_only=True)
def create_view(request, email, role):
    result = mutations.create_record(request_data(request), email)
    return result_response(result, status=201 if result.success else None)


@require_POST
@session_view(admin_only=True)
def update_view(request, email, role, handle):
    return result_response(mutations.update_record(request_data(request), handle, email))


@require_POST
@session_view(admin_only=True)
def delete_view(request, email, role, handle):
    return result_response(mutations.delete_record(handle, email))
