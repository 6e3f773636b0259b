"""Repository related models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RepositorySource(BaseModel):
    """Repository source configuration."""

    id: str
    name: str
    url: str
    preserve_local_changes: bool = False


class SyncAction(str, Enum):
    """What a sync did to the working copy."""

    CLONED = "cloned"
    UPDATED = "updated"
    PRESERVED_LOCAL = "preserved_local"


class SyncWarning(BaseModel):
    """A tolerated git failure during sync of an existing working copy."""

    operation: str
    detail: str


class SyncOutcome(BaseModel):
    """Result of synchronizing one managed repository."""

    name: str
    path: Path
    action: SyncAction
    branch: str | None = None  # Branch the working copy was reconciled against
    commit_hash: str | None = None
    previous_commit: str | None = None  # HEAD before the sync; None when freshly cloned
    warnings: list[SyncWarning] = Field(default_factory=list)

    @property
    def preserved_local(self) -> bool:
        return self.action is SyncAction.PRESERVED_LOCAL

    @property
    def commit_changed(self) -> bool:
        return self.previous_commit is None or self.commit_hash != self.previous_commit
