#!/usr/bin/env python3
"""
Zone Registry

Static mapping from provider zone IDs to the (fqdn, record type) pairs each
zone manages, loaded once per provider account from configuration.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

# Internal imports
from .exceptions import ConfigError
from .records import RecordKey, RecordType

################################################################################
# CONSTANTS
################################################################################

AWS_ACCOUNTS_PATH = "ddns.dns-server.aws"

################################################################################
# ZONE SUBSCRIPTION
################################################################################

@dataclass(frozen=True)
class ZoneSubscription:
    """A provider zone and the ordered records it is responsible for."""
    zone_id: str
    records: Tuple[RecordKey, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZoneSubscription":
        """Build from {'id': ..., 'records': [{'fqdn': ..., 'type': ...}]}."""
        zone_id = str(data["id"]).strip()
        if not zone_id:
            raise ValueError("zone id must not be empty")

        records = []
        for entry in data.get("records", []):
            key = (str(entry["fqdn"]).strip(), RecordType.parse(entry["type"]))
            if key not in records:
                records.append(key)

        return cls(zone_id=zone_id, records=tuple(records))

################################################################################
# ZONE REGISTRY
################################################################################

@dataclass(frozen=True)
class ZoneRegistry:
    """Zones of one provider account."""
    account: str
    credentials_file: Optional[str] = None
    profile: Optional[str] = None
    zones: Tuple[ZoneSubscription, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZoneRegistry":
        """Build from one [[ddns.dns-server.aws]] entry."""
        return cls(
            account=str(data["account"]),
            credentials_file=data.get("credentials-file"),
            profile=data.get("profile"),
            zones=tuple(ZoneSubscription.from_dict(zone) for zone in data.get("zones", []))
        )

    @classmethod
    def load_all(cls, config: Any) -> List["ZoneRegistry"]:
        """Load every configured provider account."""
        return config.decode_records(AWS_ACCOUNTS_PATH, cls.from_dict)

    @classmethod
    def from_config(cls, config: Any, account_name: str) -> "ZoneRegistry":
        """Load the zones of the named account. Raises ConfigError if it is not configured."""
        for registry in cls.load_all(config):
            if registry.account == account_name:
                return registry
        raise ConfigError(f"account {account_name} doesn't exist")

    def managed_keys(self) -> List[RecordKey]:
        """All subscribed (fqdn, type) pairs in configuration order, without duplicates."""
        keys: List[RecordKey] = []
        for zone in self.zones:
            for key in zone.records:
                if key not in keys:
                    keys.append(key)
        return keys
