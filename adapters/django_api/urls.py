"""
ROS Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views

RECORD = "records/<str:type_name>/<str:record_id>"
ARCHIVED = "archived/<str:type_name>/<str:record_id>"
SUBRECORD = RECORD + "/<str:kind>/<str:sub_id>"


urlpatterns = [
    path(f"{RECORD}/archive", views.record_archive_view),
    path(f"{ARCHIVED}/restore", views.record_restore_view),
    path(f"{ARCHIVED}/purge", views.record_purge_view),
    path("reminders/<str:type_name>", views.reminders_view),
    path(f"{RECORD}/<str:kind>", views.subrecord_add_view),
    path(f"{SUBRECORD}/edit", views.subrecord_edit_view),
    path(f"{SUBRECORD}/submit", views.subrecord_submit_view),
    path(f"{SUBRECORD}/remove", views.subrecord_remove_view),
    path(f"{SUBRECORD}/comment", views.subrecord_comment_view),
]
