"""
issuer registry

one admin identity, set once; an insertion-ordered list of issuer public
keys that only the admin can extend. issuers are never removed.
"""

import logging
import threading
from typing import List, Optional

from ringkyc.errors import AlreadyInitialized, DuplicateIssuer, InvalidParameter, Unauthorized
from ringkyc.group import Point

logger = logging.getLogger(__name__)


class IssuerRegistry:
    """admin-controlled list of authorized issuer keys"""

    def __init__(self) -> None:
        self._admin: Optional[str] = None
        self._issuers: List[Point] = []
        self._lock = threading.Lock()

    def initialize(self, admin: str) -> None:
        """set the admin identity; fails if an admin already exists"""
        if not isinstance(admin, str) or not admin:
            raise InvalidParameter("admin identity must be a non-empty string")
        with self._lock:
            if self._admin is not None:
                raise AlreadyInitialized("registry already has an admin")
            self._admin = admin
        logger.info("registry initialized")

    def get_admin(self) -> Optional[str]:
        return self._admin

    def register_issuer(self, pub_key: Point, caller: str) -> None:
        """append an issuer key; caller must be the admin"""
        if not isinstance(pub_key, Point) or pub_key.is_infinity():
            raise InvalidParameter("issuer key must be a non-identity point")
        with self._lock:
            if self._admin is None or caller != self._admin:
                logger.warning("rejected issuer registration from non-admin caller")
                raise Unauthorized("only the admin may register issuers")
            if pub_key in self._issuers:
                raise DuplicateIssuer(f"issuer {pub_key.to_hex()[:16]}... already registered")
            # copy-on-write so concurrent readers keep a complete list
            self._issuers = self._issuers + [pub_key]
            count = len(self._issuers)
        logger.info("registered issuer %s... (%d total)", pub_key.to_hex()[:16], count)

    def list_issuers(self) -> List[Point]:
        """issuers in registration order"""
        return list(self._issuers)

    def is_issuer(self, pub_key: Point) -> bool:
        return pub_key in self._issuers

    def restore(self, admin: Optional[str], issuers: List[Point]) -> None:
        """load persisted state into an empty registry"""
        with self._lock:
            if self._admin is not None or self._issuers:
                raise AlreadyInitialized("cannot restore into a populated registry")
            if len(set(issuers)) != len(issuers):
                raise DuplicateIssuer("persisted issuer list contains duplicates")
            self._admin = admin
            self._issuers = list(issuers)
