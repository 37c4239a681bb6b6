#!/usr/bin/env python3
"""
Batch Builder

Turns changed records into one upsert batch per provider zone. Pure and
order preserving: zones and changes follow configuration order, and zones
without a matching change produce no batch at all.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

# Internal imports
from .records import DomainRecord, RecordType
from .zones import ZoneSubscription

DEFAULT_TTL = 300

################################################################################
# BATCH TYPES
################################################################################

@dataclass(frozen=True)
class Change:
    """Upsert of one record set."""
    fqdn: str
    record_type: RecordType
    value: str
    ttl: int = DEFAULT_TTL

    def to_dict(self) -> Dict[str, Any]:
        """Route 53 change entry."""
        return {
            "Action": "UPSERT",
            "ResourceRecordSet": {
                "Name": self.fqdn,
                "Type": self.record_type.value,
                "TTL": self.ttl,
                "ResourceRecords": [{"Value": self.value}],
            },
        }


@dataclass(frozen=True)
class UpdateBatch:
    """All changes for one zone in one reconciliation cycle."""
    zone_id: str
    changes: Tuple[Change, ...]

    @property
    def comment(self) -> str:
        return f"changes for zone id {self.zone_id}"

    def to_change_batch(self) -> Dict[str, Any]:
        """Route 53 ChangeBatch payload."""
        return {
            "Comment": self.comment,
            "Changes": [change.to_dict() for change in self.changes],
        }

################################################################################
# BATCH BUILDER
################################################################################

def build_batches(records: Sequence[DomainRecord], zones: Sequence[ZoneSubscription]) -> List[UpdateBatch]:
    """Build one UpdateBatch per zone that subscribes to at least one of the records.

    Matching is exact on (fqdn, record type).
    """
    batches = []

    for zone in zones:
        changes = []
        for key in zone.records:
            for record in records:
                if record.key == key:
                    changes.append(Change(fqdn=record.fqdn, record_type=record.record_type, value=record.value))

        if changes:
            batches.append(UpdateBatch(zone_id=zone.zone_id, changes=tuple(changes)))

    return batches
