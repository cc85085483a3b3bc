"""
ROS Core Config — Admin-Configurable Rules
=============================================
Doctrine: No hardcoded record types in engine logic.
Identifier prefixes, duplicate-contact peers, sub-collection kinds and
the locked-field override allow-list come from configuration data,
not from source code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from core.time.clock import DEFAULT_LOCAL_TIME_ZONE


# ══════════════════════════════════════════════════════════════
# DEFAULTS
# ══════════════════════════════════════════════════════════════

SUB_KIND_PAYMENTS = "payments"
SUB_KIND_WORKERS = "workers"
SUB_KIND_AGENTS = "agents"
SUB_KINDS = (SUB_KIND_PAYMENTS, SUB_KIND_WORKERS, SUB_KIND_AGENTS)

DEFAULT_OVERRIDE_FIELDS: Dict[str, Tuple[str, ...]] = {
    SUB_KIND_PAYMENTS: ("reminderDate",),
    SUB_KIND_WORKERS: ("basicSalary",),
    SUB_KIND_AGENTS: ("basicSalary",),
}


# ══════════════════════════════════════════════════════════════
# RECORD TYPE RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RecordTypeRule:
    """
    How records of one type are numbered and de-duplicated.

    The identifier prefix may depend on a field of the record being
    created (agent type, department); variant_prefixes maps that field's
    value to a prefix and `prefix` is used when nothing matches.
    """

    type_name: str
    prefix: str
    id_field: str = "idNo"
    max_digits: Optional[int] = None
    variant_field: Optional[str] = None
    variant_prefixes: Tuple[Tuple[str, str], ...] = ()
    contact_field: Optional[str] = None
    duplicate_peers: Tuple[str, ...] = ()
    sub_kinds: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.type_name or "/" in self.type_name:
            raise ValueError("type_name must be a non-empty path segment.")
        if not self.prefix:
            raise ValueError("prefix must be non-empty.")
        if self.variant_prefixes and not self.variant_field:
            raise ValueError("variant_prefixes requires variant_field.")
        for kind in self.sub_kinds:
            if kind not in SUB_KINDS:
                raise ValueError(f"Unknown sub-collection kind '{kind}'.")

    def prefix_for(self, fields: Optional[Mapping[str, Any]] = None) -> str:
        if self.variant_field and fields:
            variant = fields.get(self.variant_field)
            for value, prefix in self.variant_prefixes:
                if variant == value:
                    return prefix
        return self.prefix

    def all_prefixes(self) -> Tuple[str, ...]:
        seen = [self.prefix]
        for _, prefix in self.variant_prefixes:
            if prefix not in seen:
                seen.append(prefix)
        return tuple(seen)

    def peers(self) -> Tuple[str, ...]:
        """Collections scanned for a duplicate contact (own type first)."""
        others = tuple(p for p in self.duplicate_peers if p != self.type_name)
        return (self.type_name,) + others


DEFAULT_RECORD_TYPES: Tuple[RecordTypeRule, ...] = (
    RecordTypeRule(
        type_name="HospitalData",
        prefix="H",
        max_digits=4,
        sub_kinds=(SUB_KIND_AGENTS, SUB_KIND_PAYMENTS),
    ),
    RecordTypeRule(
        type_name="AgentData",
        prefix="AW",
        max_digits=4,
        variant_field="agentType",
        variant_prefixes=(("worker", "AW"), ("client", "AC")),
        contact_field="mobile",
        sub_kinds=(SUB_KIND_PAYMENTS,),
    ),
    RecordTypeRule(
        type_name="ClientData",
        prefix="JC-HC-",
        variant_field="department",
        variant_prefixes=(
            ("Home Care", "JC-HC-"),
            ("Housekeeping", "JC-HK-"),
            ("Others", "JC-OT-"),
        ),
        contact_field="mobileNo1",
        duplicate_peers=("WorkerData",),
        sub_kinds=(SUB_KIND_PAYMENTS, SUB_KIND_WORKERS),
    ),
    RecordTypeRule(
        type_name="WorkerData",
        prefix="JW",
        variant_field="department",
        variant_prefixes=(
            ("Home Care", "JW"),
            ("Housekeeping", "HKW-"),
            ("Security", "SW-"),
        ),
        contact_field="mobileNo1",
        duplicate_peers=("ClientData",),
        sub_kinds=(SUB_KIND_PAYMENTS,),
    ),
)


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """
    Protocol for admin-configured rule storage.

    Implementations may back this with Django settings, a database,
    or an in-memory store.
    """

    @property
    def local_time_zone(self) -> str:
        ...  # pragma: no cover

    @property
    def reminders_include_upcoming(self) -> bool:
        ...  # pragma: no cover

    def get_record_type(self, type_name: str) -> Optional[RecordTypeRule]:
        """Fetch the rule for a record type, None if unconfigured."""
        ...  # pragma: no cover

    def record_types(self) -> Tuple[RecordTypeRule, ...]:
        ...  # pragma: no cover

    def override_fields(self) -> Dict[str, Tuple[str, ...]]:
        """Sub-collection kind → fields still editable once locked."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CONFIG STORE (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

class InMemoryConfigStore:
    """Simple in-memory config store for testing and bootstrap."""

    def __init__(
        self,
        *,
        record_types: Optional[Iterable[RecordTypeRule]] = None,
        override_fields: Optional[Mapping[str, Iterable[str]]] = None,
        local_time_zone: str = DEFAULT_LOCAL_TIME_ZONE,
        reminders_include_upcoming: bool = False,
    ) -> None:
        self._record_types: Dict[str, RecordTypeRule] = {}
        for rule in (DEFAULT_RECORD_TYPES if record_types is None else record_types):
            self.add_record_type(rule)
        source = DEFAULT_OVERRIDE_FIELDS if override_fields is None else override_fields
        self._override_fields = {
            kind: tuple(fields) for kind, fields in source.items()
        }
        self._local_time_zone = local_time_zone
        self._include_upcoming = bool(reminders_include_upcoming)

    @property
    def local_time_zone(self) -> str:
        return self._local_time_zone

    @property
    def reminders_include_upcoming(self) -> bool:
        return self._include_upcoming

    def add_record_type(self, rule: RecordTypeRule) -> None:
        self._record_types[rule.type_name] = rule

    def get_record_type(self, type_name: str) -> Optional[RecordTypeRule]:
        return self._record_types.get(type_name)

    def record_types(self) -> Tuple[RecordTypeRule, ...]:
        return tuple(self._record_types.values())

    def override_fields(self) -> Dict[str, Tuple[str, ...]]:
        return dict(self._override_fields)


# ══════════════════════════════════════════════════════════════
# DJANGO SETTINGS LOADER
# ══════════════════════════════════════════════════════════════

def _rule_from_setting(type_name: str, raw: Mapping[str, Any]) -> RecordTypeRule:
    variants = raw.get("variant_prefixes") or {}
    return RecordTypeRule(
        type_name=type_name,
        prefix=raw["prefix"],
        id_field=raw.get("id_field", "idNo"),
        max_digits=raw.get("max_digits"),
        variant_field=raw.get("variant_field"),
        variant_prefixes=tuple(variants.items()),
        contact_field=raw.get("contact_field"),
        duplicate_peers=tuple(raw.get("duplicate_peers", ())),
        sub_kinds=tuple(raw.get("sub_kinds", ())),
    )


def load_config_from_settings(settings_obj: Any = None) -> InMemoryConfigStore:
    """
    Build a config store from ROS_* Django settings.

    Missing settings fall back to the built-in defaults, so an
    unconfigured project still gets the standard record types.
    """
    if settings_obj is None:
        from django.conf import settings as settings_obj

    raw_types = getattr(settings_obj, "ROS_RECORD_TYPES", None)
    record_types = None
    if raw_types:
        record_types = [
            _rule_from_setting(name, raw) for name, raw in raw_types.items()
        ]

    return InMemoryConfigStore(
        record_types=record_types,
        override_fields=getattr(settings_obj, "ROS_OVERRIDE_FIELDS", None),
        local_time_zone=getattr(
            settings_obj, "ROS_LOCAL_TIME_ZONE", DEFAULT_LOCAL_TIME_ZONE,
        ),
        reminders_include_upcoming=getattr(
            settings_obj, "ROS_REMINDERS_INCLUDE_UPCOMING", False,
        ),
    )
