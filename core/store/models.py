"""
ROS Store — Persistent Document Model
=======================================
Backs DjangoDocumentStore. One row per stored document; hierarchy is
encoded in `path` and indexed through `parent_path` so direct-children
listing and equality queries stay single-table.

This file contains NO business logic.
"""

from __future__ import annotations

from django.db import models


class StoredDocument(models.Model):
    path = models.CharField(
        max_length=512,
        primary_key=True,
        help_text="Slash-separated address, e.g. Active/Hospital/H1/payments/H1-2.",
    )
    parent_path = models.CharField(
        max_length=512,
        db_index=True,
        help_text="Path of the enclosing collection.",
    )
    fields = models.JSONField(default=dict)
    version = models.PositiveIntegerField(
        default=1,
        help_text="Optimistic-concurrency token; incremented on every write.",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ros_documents"
        ordering = ["path"]

    def __str__(self) -> str:
        return f"{self.path} (v{self.version})"
