from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Protocol

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor

logger = logging.getLogger(__name__)


class AuditTrail(Protocol):
    def record_audit_entry(
        self,
        *,
        action: str,
        actor_id: Optional[int],
        entity_type: str,
        entity_id: str,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class MySQLAuditTrail(AuditTrail):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record_audit_entry(
        self,
        *,
        action: str,
        actor_id: Optional[int],
        entity_type: str,
        entity_id: str,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(action, actor_id, entity_type, entity_id, meta)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    action,
                    actor_id,
                    entity_type,
                    str(entity_id),
                    json.dumps(dict(meta), default=str) if meta else None,
                ),
            )


def audit_quietly(audit: Optional[AuditTrail], **kwargs: Any) -> None:
    """Fire-and-forget audit write; failures are logged, never raised."""
    if audit is None:
        return
    try:
        audit.record_audit_entry(**kwargs)
    except Exception:
        logger.exception("Audit entry %s for %s %s was not recorded", kwargs.get("action"), kwargs.get("entity_type"), kwargs.get("entity_id"))
