# delete.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from kubernetes.client.rest import ApiException

from errors import TeardownError

DELETED = "Deleted"
ALREADY_ABSENT = "AlreadyAbsent"
FAILED = "Failed"


@dataclass
class DeleteResult:
    kind: str
    name: str
    outcome: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome != FAILED

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise TeardownError(self.kind, self.name, self.error) from self.error


def delete(gateway, kind: str, name: str, namespace: Optional[str] = None, options=None) -> DeleteResult:
    """Issue one delete request; a missing object counts as success. No retries."""
    try:
        gateway.delete(kind, name, namespace=namespace, options=options)
    except ApiException as e:
        if e.status == 404:
            return DeleteResult(kind, name, ALREADY_ABSENT)
        return DeleteResult(kind, name, FAILED, e)
    except Exception as e:
        return DeleteResult(kind, name, FAILED, e)
    return DeleteResult(kind, name, DELETED)
