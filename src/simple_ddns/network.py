#!/usr/bin/env python3
"""
Network Utilities Module

Public IP detection against plain-text IP echo endpoints (ipify style).
IPv4 and IPv6 are resolved independently; a failing family is reported in
the log and left empty, it never fails the other family.

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
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

# Third-party imports
import requests

# Internal imports
from .exceptions import OperationCancelled, ResolutionError, ValidationError
from .records import PublicAddress, RecordType, validate_address

################################################################################
# CONSTANTS
################################################################################

PUBLIC_IP_PATH = "ddns.storage.public-ip-api.ipify"

FAMILY_TYPES = {
    "ipv4": RecordType.A,
    "ipv6": RecordType.AAAA,
}

################################################################################
# ADDRESS RESOLVER CLASS - Public IP Detection
################################################################################

class AddressResolver:
    """Resolves the public IPv4 and IPv6 addresses of this host."""

    def __init__(self, ipv4_detection_url: Optional[str] = None, ipv6_detection_url: Optional[str] = None,
                 timeout: float = 10, session: Optional[Any] = None, logger: Optional[Any] = None) -> None:
        """Initialize resolver. A family without detection URL is never resolved."""
        self.urls = {
            "ipv4": ipv4_detection_url,
            "ipv6": ipv6_detection_url,
        }
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.logger = logger if logger else logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Any, session: Optional[Any] = None, logger: Optional[Any] = None) -> "AddressResolver":
        """Build resolver from [ddns.storage.public-ip-api.ipify] (ipv4.endpoint / ipv6.endpoint)."""
        return cls(
            ipv4_detection_url=config.decode_optional_str(f"{PUBLIC_IP_PATH}.ipv4.endpoint"),
            ipv6_detection_url=config.decode_optional_str(f"{PUBLIC_IP_PATH}.ipv6.endpoint"),
            timeout=config.decode_float(f"{PUBLIC_IP_PATH}.timeout", 10),
            session=session,
            logger=logger
        )

    ################################################################################
    # IP ADDRESS DETECTION - Public IP Retrieval
    ################################################################################

    def resolve(self, cancel: Optional[threading.Event] = None) -> PublicAddress:
        """Resolve both families concurrently. Returns PublicAddress with None for failed families.

        Raises:
            OperationCancelled: If cancel is set
        """
        if cancel is not None and cancel.is_set():
            raise OperationCancelled("Address resolution cancelled")

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="resolve") as executor:
            ipv4 = executor.submit(self.resolve_family, "ipv4", cancel)
            ipv6 = executor.submit(self.resolve_family, "ipv6", cancel)
            address = PublicAddress(v4=ipv4.result(), v6=ipv6.result())

        if cancel is not None and cancel.is_set():
            raise OperationCancelled("Address resolution cancelled")

        self.logger.debug(f"Public addresses: IPv4={address.v4}, IPv6={address.v6}")
        return address

    def resolve_family(self, family: str, cancel: Optional[threading.Event] = None) -> Optional[str]:
        """Resolve one family ('ipv4' or 'ipv6'). Returns the address or None on any failure."""
        url = self.urls[family]
        if not url:
            self.logger.debug(f"{family} detection disabled (no endpoint configured)")
            return None

        try:
            if cancel is not None and cancel.is_set():
                raise ResolutionError(family, "cancelled")
            request = self._build_request(family, url)
            body = self._execute(family, request)
            address = self._validate(family, body)
        except ResolutionError as e:
            self.logger.error(f"Failed to detect {family} address: {e}")
            return None

        self.logger.debug(f"{family} address detected: {address}")
        return address

    ################################################################################
    # PRIVATE METHODS - Build / Execute / Validate Pipeline
    ################################################################################

    def _build_request(self, family: str, url: str) -> requests.PreparedRequest:
        try:
            return requests.Request("GET", url).prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ResolutionError(family, f"url={url} request build error: {e}") from e

    def _execute(self, family: str, request: requests.PreparedRequest) -> str:
        try:
            response = self.session.send(request, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ResolutionError(family, f"url={request.url} timeout: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ResolutionError(family, f"url={request.url} network error: {e}") from e

        if response.status_code != 200:
            raise ResolutionError(family, f"url={request.url} http error: status {response.status_code}")

        return response.text

    def _validate(self, family: str, body: str) -> str:
        address = body.strip()
        try:
            return validate_address(FAMILY_TYPES[family], address)
        except ValidationError as e:
            raise ResolutionError(family, str(e)) from e
