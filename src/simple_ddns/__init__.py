#!/usr/bin/env python3
"""
SIMPLE-DDNS

Dynamic DNS Client for AWS Route 53

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

# Package metadata
__version__ = "1.0.0"
__author__ = "Manuel Ziel"
__description__ = "Dynamic DNS Client for AWS Route 53"
__software_name__ = "simple-ddns"

# Package imports
from .logger import LoggerManager
from .exceptions import DynDNSException
from .records import DomainRecord, PublicAddress, RecordType
from .config import ConfigManager
from .database import RecordStore
from .network import AddressResolver
from .zones import ZoneRegistry, ZoneSubscription
from .batches import Change, UpdateBatch, build_batches
from .provider import ProviderUpdater
from .application import Application, CycleResult
from .daemon import DaemonManager

__all__ = [
    'LoggerManager',
    'DynDNSException',
    'DomainRecord',
    'PublicAddress',
    'RecordType',
    'ConfigManager',
    'RecordStore',
    'AddressResolver',
    'ZoneRegistry',
    'ZoneSubscription',
    'Change',
    'UpdateBatch',
    'build_batches',
    'ProviderUpdater',
    'Application',
    'CycleResult',
    'DaemonManager',
]
