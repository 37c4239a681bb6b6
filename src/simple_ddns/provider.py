#!/usr/bin/env python3
"""
Provider Updater Module

Submits per-zone upsert batches to AWS Route 53. Every batch is attempted;
failures are logged per zone and reported once as a SubmissionError.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import logging
import os
import threading
from typing import Any, List, Optional, Sequence

# Third-party imports
import boto3
import botocore.session
from botocore.exceptions import BotoCoreError, ClientError

# Internal imports
from .batches import UpdateBatch, build_batches
from .exceptions import OperationCancelled, SubmissionError
from .records import DomainRecord
from .zones import ZoneRegistry

################################################################################
# CLIENT FACTORY
################################################################################

def create_route53_client(credentials_file: Optional[str] = None, profile: Optional[str] = None) -> Any:
    """Create a Route 53 client, optionally from a specific shared credentials file."""
    core_session = botocore.session.Session(profile=profile)
    if credentials_file:
        core_session.set_config_variable("credentials_file", os.path.expanduser(credentials_file))

    session = boto3.Session(botocore_session=core_session)
    return session.client("route53")

################################################################################
# PROVIDER UPDATER CLASS - Route 53 Batch Submission
################################################################################

class ProviderUpdater:
    """Pushes changed records of one provider account to its zones."""

    def __init__(self, registry: ZoneRegistry, client: Any, logger: Optional[Any] = None) -> None:
        self.registry = registry
        self.client = client
        self.logger = logger if logger else logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Any, account_name: str, logger: Optional[Any] = None) -> "ProviderUpdater":
        """Build updater for a configured account. Raises ConfigError if the account is unknown."""
        return cls.from_registry(ZoneRegistry.from_config(config, account_name), logger=logger)

    @classmethod
    def from_registry(cls, registry: ZoneRegistry, logger: Optional[Any] = None) -> "ProviderUpdater":
        client = create_route53_client(registry.credentials_file, registry.profile)
        return cls(registry, client, logger=logger)

    @property
    def account(self) -> str:
        return self.registry.account

    ################################################################################
    # PUBLIC INTERFACE - Updates
    ################################################################################

    def update_domains(self, records: Sequence[DomainRecord], cancel: Optional[threading.Event] = None) -> None:
        """Build batches for the changed records and submit them."""
        self.submit(build_batches(records, self.registry.zones), cancel)

    def submit(self, batches: Sequence[UpdateBatch], cancel: Optional[threading.Event] = None) -> None:
        """Submit every batch, even after failures.

        Raises:
            SubmissionError: If at least one batch failed (after all were attempted)
            OperationCancelled: If cancel is set before a batch is sent
        """
        failed_zones: List[str] = []

        for batch in batches:
            if cancel is not None and cancel.is_set():
                raise OperationCancelled(f"Submission cancelled before zone {batch.zone_id}")

            self.logger.debug(f"Submitting {len(batch.changes)} changes to zone {batch.zone_id} ({self.account})")
            try:
                self.client.change_resource_record_sets(
                    HostedZoneId=batch.zone_id,
                    ChangeBatch=batch.to_change_batch()
                )
            except (BotoCoreError, ClientError) as e:
                self.logger.error(f"Failed to update zone {batch.zone_id} ({self.account}): {e}")
                failed_zones.append(batch.zone_id)
                continue
            except Exception as e:
                self.logger.error(f"Unexpected error updating zone {batch.zone_id} ({self.account}): {e}")
                failed_zones.append(batch.zone_id)
                continue

            for change in batch.changes:
                self.logger.info(f"Updated '{change.fqdn}' ({change.record_type.value}) > {change.value} in zone {batch.zone_id}")

        if failed_zones:
            raise SubmissionError(failed_zones=failed_zones)
