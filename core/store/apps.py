"""
ROS Store — App Configuration
===============================
Django-backed implementation of the hierarchical document store.

This app:
- Persists documents by path with a version token
- Commits multi-document batches atomically

This app does NOT:
- Interpret record or sub-record meaning
- Enforce lock policies (engines.subledger does)
"""

from django.apps import AppConfig


class StoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.store"
    label = "ros_store"
    verbose_name = "ROS Document Store"
