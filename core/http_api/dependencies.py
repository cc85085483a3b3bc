"""
ROS HTTP API - Dependencies
===========================
Injected services and clock for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config.rules import ConfigStore
from core.time.clock import Clock
from engines.records.services import RecordService


@dataclass(frozen=True)
class HttpApiDependencies:
    record_service: RecordService
    config: ConfigStore
    clock: Clock
