#!/usr/bin/env python3
"""
DNS Record Model

Record types, domain records and public address containers shared by the
record store, the address resolver and the provider updater.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Internal imports
from .exceptions import ValidationError

################################################################################
# RECORD TYPES
################################################################################

class RecordType(str, Enum):
    """DNS record types managed by DynDNS."""
    A = "A"
    AAAA = "AAAA"

    @classmethod
    def parse(cls, value: Any) -> "RecordType":
        """Convert 'A' / 'AAAA' (any case) to a RecordType. Raises ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unsupported record type: {value!r} (expected A or AAAA)")

    @property
    def family(self) -> str:
        return "ipv4" if self is RecordType.A else "ipv6"


RecordKey = Tuple[str, RecordType]

################################################################################
# ADDRESS VALIDATION
################################################################################

def validate_address(record_type: RecordType, value: str) -> str:
    """Check that value is a valid address for the record type. Returns the value unchanged.

    An IPv6 address for an A record (or IPv4 for AAAA) is rejected like any
    malformed value.
    """
    parser = ipaddress.IPv4Address if record_type is RecordType.A else ipaddress.IPv6Address
    try:
        parser(value)
    except (ipaddress.AddressValueError, ValueError) as e:
        raise ValidationError(f"Invalid {record_type.family} address {value!r}: {e}")
    return value

################################################################################
# DOMAIN RECORD
################################################################################

@dataclass
class DomainRecord:
    """Hostname binding identified by (fqdn, record_type); value is the address."""
    fqdn: str
    record_type: RecordType
    value: Optional[str] = None

    @property
    def key(self) -> RecordKey:
        return (self.fqdn, self.record_type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainRecord":
        """Build a validated record from {'fqdn', 'type', 'value'}. Raises ValidationError."""
        try:
            fqdn = str(data["fqdn"]).strip()
            record_type = RecordType.parse(data["type"])
            value = str(data["value"]).strip()
        except KeyError as e:
            raise ValidationError(f"Record entry missing field {e}: {data!r}")
        except TypeError:
            raise ValidationError(f"Record entry must be a mapping, got {data!r}")

        if not fqdn:
            raise ValidationError(f"Record entry has an empty fqdn: {data!r}")

        return cls(fqdn=fqdn, record_type=record_type, value=validate_address(record_type, value))

    def to_dict(self) -> Dict[str, Any]:
        return {"fqdn": self.fqdn, "type": self.record_type.value, "value": self.value}

    def __str__(self) -> str:
        return f"{self.fqdn} ({self.record_type.value}) {self.value}"

################################################################################
# PUBLIC ADDRESS
################################################################################

@dataclass(frozen=True)
class PublicAddress:
    """Public IP addresses of this host. A family is None when it could not be resolved."""
    v4: Optional[str] = None
    v6: Optional[str] = None

    def for_type(self, record_type: RecordType) -> Optional[str]:
        return self.v4 if record_type is RecordType.A else self.v6

    @property
    def empty(self) -> bool:
        return self.v4 is None and self.v6 is None
