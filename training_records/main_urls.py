# training_records/main_urls.py
from django.urls import path, include
from django.shortcuts import redirect
from django.conf import settings
from django.conf.urls.static import static

# --- Root redirect view ---
def root_redirect(request):
    return redirect("/records/")

# --- URL patterns ---
urlpatterns = [
    path("", root_redirect, name="root_redirect"),

    # Records (list / aggregates / mutations / export)
    path("records/", include("users_ui.records.records_urls")),

    # Authentication routes
    path("accounts/", include("accounts.auth_urls")),
]

# Serve exported files in development or when explicitly enabled
if settings.DEBUG or getattr(settings, "SERVE_MEDIA", False):
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
