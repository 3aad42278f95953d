"""
Flattened deadlock graph records.

A deadlock graph is a nested <deadlock> document with a victim list, a
process list and a resource list. The extractor turns it into one
ProcessRecord per process and one ResourceRecord per lock resource; the
correlator only ever works with these records.
"""

from pydantic import BaseModel, ConfigDict, Field

from xedeadlock.constants import NOT_AVAILABLE, ProcessRole


class ProcessRecord(BaseModel):
    """A session participating in one deadlock."""

    model_config = ConfigDict(frozen=True)

    process_id: str = Field(description="Process id, unique within the event")
    session_id: int | None = Field(default=None, description="Session id (spid)")
    role: ProcessRole = Field(description="Victim or Blocker")
    query: str = Field(default=NOT_AVAILABLE, description="Input buffer text")
    resource_ids: frozenset[str] = Field(
        default_factory=frozenset, description="Resources the process contends over"
    )

    @property
    def is_victim(self) -> bool:
        return self.role == ProcessRole.VICTIM


class ResourceRecord(BaseModel):
    """A locked or requested resource within one deadlock."""

    model_config = ConfigDict(frozen=True)

    resource_id: str = Field(description="Resource id, unique within the event")
    resource_kind: str = Field(description="Lock category (keylock, pagelock, ...)")
    object_name: str = Field(default=NOT_AVAILABLE, description="Locked object")
    lock_mode: str = Field(default=NOT_AVAILABLE, description="Lock mode")
    lock_type: str | None = Field(
        default=None, description="Lock type, falls back to the raw lock mode"
    )
    owner_ids: tuple[str, ...] = Field(default=(), description="Owning process ids")
    waiter_ids: tuple[str, ...] = Field(default=(), description="Waiting process ids")

    @property
    def has_participants(self) -> bool:
        """True when the resource names its owners or waiters."""
        return bool(self.owner_ids or self.waiter_ids)


class DeadlockGraph(BaseModel):
    """All records extracted from a single <deadlock> node."""

    model_config = ConfigDict(frozen=True)

    processes: tuple[ProcessRecord, ...] = Field(default=())
    resources: tuple[ResourceRecord, ...] = Field(default=())

    @property
    def victims(self) -> list[ProcessRecord]:
        return [p for p in self.processes if p.is_victim]

    @property
    def blockers(self) -> list[ProcessRecord]:
        return [p for p in self.processes if not p.is_victim]

    @property
    def resources_by_id(self) -> dict[str, ResourceRecord]:
        return {r.resource_id: r for r in self.resources}
