# users_ui/records/records_urls.py
from django.urls import path
from . import records_views

app_name = "records"

urlpatterns = [
    # Reads
    path("", records_views.records_list, name="list"),
    path("options/", records_views.dropdown_options, name="options"),
    path("summary/", records_views.summary_stats, name="summary"),
    path("export/", records_views.export_view, name="export"),

    # Mutations (Admin)
    path("create/", records_views.create_view, name="create"),
    path("<str:handle>/", records_views.record_detail, name="detail"),
    path("<str:handle>/update/", records_views.update_view, name="update"),
    path("<str:handle>/delete/", records_views.delete_view, name="delete"),
]
