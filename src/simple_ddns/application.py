#!/usr/bin/env python3
"""
Main Application Module

Drives one reconciliation cycle: resolve public addresses, diff them against
the active records, persist the changes and push them to the DNS provider.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Project imports
from .database import RecordStore
from .exceptions import DynDNSException, OperationCancelled, SubmissionError, TransactionError
from .network import AddressResolver
from .provider import ProviderUpdater
from .records import DomainRecord, PublicAddress, RecordKey
from .zones import ZoneRegistry

################################################################################
# CYCLE RESULT
################################################################################

@dataclass
class CycleResult:
    """Outcome of one reconciliation cycle."""
    address: PublicAddress
    changed: List[DomainRecord] = field(default_factory=list)
    persisted: List[DomainRecord] = field(default_factory=list)
    failed: List[DomainRecord] = field(default_factory=list)
    submission_error: Optional[SubmissionError] = None

    @property
    def ok(self) -> bool:
        return not self.failed and self.submission_error is None

################################################################################
# APPLICATION CLASS - Reconciliation Orchestrator
################################################################################

class Application:
    """Reconciliation orchestrator for DynDNS cycles."""

    def __init__(self, store: RecordStore, resolver: AddressResolver, updaters: Sequence[ProviderUpdater],
                 logger: Optional[Any] = None) -> None:
        """
        Initialize application.

        Args:
            store: Record store holding the last known addresses
            resolver: Public address resolver
            updaters: One provider updater per provider account
            logger: Logger instance
        """
        self.store = store
        self.resolver = resolver
        self.updaters = list(updaters)
        self.logger = logger if logger else logging.getLogger(__name__)

        self._cycle_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Any, logger: Optional[Any] = None, account: Optional[str] = None) -> "Application":
        """Build store, resolver and updaters from configuration (all accounts unless one is named)."""
        if account:
            registries = [ZoneRegistry.from_config(config, account)]
        else:
            registries = ZoneRegistry.load_all(config)

        return cls(
            store=RecordStore.from_config(config, logger=logger),
            resolver=AddressResolver.from_config(config, logger=logger),
            updaters=[ProviderUpdater.from_registry(registry, logger=logger) for registry in registries],
            logger=logger
        )

    ################################################################################
    # PUBLIC INTERFACE - Cycles
    ################################################################################

    def run_cycle(self, cancel: Optional[threading.Event] = None) -> bool:
        """Run one cycle and log its outcome. Returns True if everything was applied."""
        try:
            result = self.reconcile(cancel)
        except OperationCancelled as e:
            self.logger.warning(f"Cycle cancelled: {e}")
            return False
        except DynDNSException as e:
            self.logger.error(f"Application cycle failed: {e}")
            return False

        if result.failed:
            self.logger.error(f"{len(result.failed)} record(s) could not be stored and were skipped")
        if result.submission_error:
            self.logger.error(
                f"Provider update failed for zone(s): {', '.join(result.submission_error.failed_zones)}"
            )
        if result.ok and result.persisted:
            self.logger.success(f"Updated {len(result.persisted)} record(s)")

        return result.ok

    def reconcile(self, cancel: Optional[threading.Event] = None) -> CycleResult:
        """Execute one cycle (resolve > diff > persist > submit).

        Cycles never overlap: a second caller waits for the running cycle.

        Raises:
            StoreError: If the active records cannot be read
            OperationCancelled: If cancel is set during the cycle
        """
        with self._cycle_lock:
            self.logger.debug("Starting reconciliation cycle...")

            address = self._step_resolve(cancel)
            result = CycleResult(address=address)

            result.changed = self._step_diff(address, cancel)
            if not result.changed:
                self.logger.debug("All records up-to-date")
                return result

            result.persisted, result.failed = self._step_persist(result.changed, cancel)
            if result.persisted:
                result.submission_error = self._step_submit(result.persisted, cancel)

            self.logger.debug("Reconciliation cycle completed")
            return result

    def managed_keys(self) -> List[RecordKey]:
        """All (fqdn, type) pairs subscribed by any account, in configuration order."""
        keys: List[RecordKey] = []
        for updater in self.updaters:
            for key in updater.registry.managed_keys():
                if key not in keys:
                    keys.append(key)
        return keys

    def cleanup(self) -> None:
        """Release the record store connections."""
        self.store.close()

    ################################################################################
    # PRIVATE METHODS - Cycle Steps
    ################################################################################

    def _step_resolve(self, cancel: Optional[threading.Event]) -> PublicAddress:
        """Step 1: Resolve public addresses."""
        address = self.resolver.resolve(cancel)

        if address.empty:
            self.logger.warning("No IP addresses detected")
        return address

    def _step_diff(self, address: PublicAddress, cancel: Optional[threading.Event]) -> List[DomainRecord]:
        """Step 2: Compare resolved addresses with the active records."""
        active: Dict[RecordKey, Optional[str]] = {
            record.key: record.value for record in self.store.get_active_records(cancel)
        }

        changed = []
        for fqdn, record_type in self.managed_keys():
            new_ip = address.for_type(record_type)
            if new_ip is None:
                self.logger.debug(f"Skipping {record_type.value} record '{fqdn}' - no {record_type.family} detected")
                continue

            old_ip = active.get((fqdn, record_type))
            if old_ip == new_ip:
                self.logger.debug(f"Record '{fqdn}' ({record_type.value}) unchanged: {old_ip}")
                continue

            if old_ip:
                self.logger.info(f"Record '{fqdn}' ({record_type.value}) needs update: {old_ip} > {new_ip}")
            else:
                self.logger.info(f"Record '{fqdn}' ({record_type.value}) needs initial IP: > {new_ip}")
            changed.append(DomainRecord(fqdn=fqdn, record_type=record_type, value=new_ip))

        return changed

    def _step_persist(self, changed: List[DomainRecord],
                      cancel: Optional[threading.Event]) -> Tuple[List[DomainRecord], List[DomainRecord]]:
        """Step 3: Store each changed record; a failed write only drops that record."""
        persisted, failed = [], []

        for record in changed:
            try:
                self.store.update_record(record, cancel)
            except TransactionError as e:
                self.logger.error(f"Failed to store '{record.fqdn}' ({record.record_type.value}): {e}")
                failed.append(record)
                continue
            persisted.append(record)

        return persisted, failed

    def _step_submit(self, records: List[DomainRecord],
                     cancel: Optional[threading.Event]) -> Optional[SubmissionError]:
        """Step 4: Push stored changes to every provider account."""
        failed_zones: List[str] = []

        for updater in self.updaters:
            try:
                updater.update_domains(records, cancel)
            except SubmissionError as e:
                self.logger.error(f"Account '{updater.account}': {e}")
                failed_zones.extend(e.failed_zones)
            except OperationCancelled:
                raise
            except Exception as e:
                self.logger.error(f"Account '{updater.account}' update failed: {e}")
                failed_zones.extend(zone.zone_id for zone in updater.registry.zones)

        if failed_zones:
            return SubmissionError(failed_zones=failed_zones)
        return None
