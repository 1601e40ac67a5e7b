"""In-memory identity directory for testing.

Lets the deletion flow run end to end without PostgreSQL.
"""

import asyncio
import uuid
from typing import Any

from app.providers.errors import IdentityDirectoryError
from app.providers.identity.base import IdentityDirectory


class MockIdentityDirectory(IdentityDirectory):
    """Mock directory backed by a dict.

    Attributes:
        principals: Identifier → principal id for live principals.
        retained_records: Principal id → number of records still holding
            personal data.
        deleted: Principal ids actually removed, in order. A principal
            appears at most once.
        calls: Record of all method invocations for test assertions.
        fail_on: Method name that should raise IdentityDirectoryError.
        delay_seconds: Sleep inside delete_principal, so tests can overlap
            two deletions.
    """

    def __init__(
        self,
        identifiers: list[str] | None = None,
        *,
        fail_on: str | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.principals: dict[str, uuid.UUID] = {}
        self.retained_records: dict[uuid.UUID, int] = {}
        self.deleted: list[uuid.UUID] = []
        self.calls: list[dict[str, Any]] = []
        self.fail_on = fail_on
        self.delay_seconds = delay_seconds
        for identifier in identifiers or []:
            self.add_principal(identifier)

    def add_principal(self, identifier: str, retained_records: int = 0) -> uuid.UUID:
        """Register a principal and return its id."""
        principal_id = uuid.uuid4()
        self.principals[identifier] = principal_id
        self.retained_records[principal_id] = retained_records
        return principal_id

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append({"method": method, **kwargs})
        if self.fail_on == method:
            raise IdentityDirectoryError(f"Simulated {method} failure")

    async def exists_identity(self, identifier: str) -> bool:
        self._record("exists_identity", identifier=identifier)
        return identifier in self.principals

    async def resolve_principal(self, identifier: str) -> uuid.UUID | None:
        self._record("resolve_principal", identifier=identifier)
        return self.principals.get(identifier)

    async def anonymize_retained_records(self, principal_id: uuid.UUID) -> int:
        self._record("anonymize_retained_records", principal_id=principal_id)
        count = self.retained_records.get(principal_id, 0)
        self.retained_records[principal_id] = 0
        return count

    async def delete_principal(self, principal_id: uuid.UUID) -> bool:
        self._record("delete_principal", principal_id=principal_id)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        for identifier, live_id in list(self.principals.items()):
            if live_id == principal_id:
                del self.principals[identifier]
                self.deleted.append(principal_id)
                return True
        return False
