"""
Deadlock graph extraction.

Flattens the nested <deadlock> document of an xml_deadlock_report event into
ProcessRecord and ResourceRecord objects. Extraction is a pure function of
the payload: nothing is cached and the element tree is never modified.

A deadlock graph looks like:

    <deadlock>
      <victim-list><victimProcess id="process1"/></victim-list>
      <process-list>
        <process id="process1" spid="55" ...><inputbuf>...</inputbuf></process>
        <process id="process2" spid="61" ...>...</process>
      </process-list>
      <resource-list>
        <keylock id="lock1" objectname="db.dbo.T" mode="X" ...>
          <owner-list><owner id="process2" mode="X"/></owner-list>
          <waiter-list><waiter id="process1" mode="S"/></waiter-list>
        </keylock>
      </resource-list>
    </deadlock>
"""

import logging

from xml.etree.ElementTree import Element

from xedeadlock.constants import (
    NOT_AVAILABLE,
    OWNER_PATH,
    PROCESS_PATH,
    RESOURCE_LIST_PATH,
    VICTIM_LIST_PATH,
    VICTIM_PROCESS_PATH,
    WAITER_PATH,
    ProcessRole,
)
from xedeadlock.models.events import DeadlockEvent
from xedeadlock.models.records import DeadlockGraph, ProcessRecord, ResourceRecord

logger = logging.getLogger(__name__)


class MalformedEventError(Exception):
    """Raised when a deadlock report lacks the structure needed to extract it."""

    def __init__(self, message: str, event: DeadlockEvent | None = None):
        super().__init__(message)
        self.event = event


def _text_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_session_id(value: str | None) -> int | None:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _participant_ids(node: Element, path: str) -> tuple[str, ...]:
    return tuple(pid for child in node.findall(path) if (pid := child.get("id")))


def extract_victim_ids(deadlock: Element) -> set[str]:
    """
    Collect the ids listed under victim-list.

    Raises:
        MalformedEventError: If the graph has no victim-list at all
    """
    if deadlock.find(VICTIM_LIST_PATH) is None:
        raise MalformedEventError("Deadlock graph has no victim-list")

    return {
        victim_id
        for victim in deadlock.findall(VICTIM_PROCESS_PATH)
        if (victim_id := victim.get("id"))
    }


def extract_resources(deadlock: Element) -> list[ResourceRecord]:
    """
    Build a ResourceRecord for every child of resource-list.

    Lock categories (keylock, pagelock, objectlock, ridlock, ...) are all
    handled the same way. Nodes without an id cannot be joined on and are
    skipped.
    """
    resource_list = deadlock.find(RESOURCE_LIST_PATH)
    if resource_list is None:
        return []

    resources = []
    for node in resource_list:
        resource_id = node.get("id")
        if not resource_id:
            logger.debug(f"Skipping <{node.tag}> resource without an id")
            continue

        mode = _text_or_none(node.get("mode"))
        lock_type = _text_or_none(node.get("locktype")) or mode

        resources.append(
            ResourceRecord(
                resource_id=resource_id,
                resource_kind=node.tag,
                object_name=_text_or_none(node.get("objectname")) or NOT_AVAILABLE,
                lock_mode=mode or NOT_AVAILABLE,
                lock_type=lock_type,
                owner_ids=_participant_ids(node, OWNER_PATH),
                waiter_ids=_participant_ids(node, WAITER_PATH),
            )
        )
    return resources


def _resources_for_process(
    process_id: str, resources: list[ResourceRecord]
) -> frozenset[str]:
    # Resources that name no owners or waiters apply to every process
    return frozenset(
        r.resource_id
        for r in resources
        if not r.has_participants
        or process_id in r.owner_ids
        or process_id in r.waiter_ids
    )


def extract_processes(
    deadlock: Element,
    victim_ids: set[str],
    resources: list[ResourceRecord],
) -> list[ProcessRecord]:
    """
    Build a ProcessRecord for every process in process-list.

    A process is a Victim when its id is listed in victim-list and a Blocker
    otherwise. This is a two-way classification; longer wait chains are
    reported as blocker/victim pairs only.
    """
    processes = []
    for node in deadlock.findall(PROCESS_PATH):
        process_id = node.get("id")
        if not process_id:
            logger.debug("Skipping process without an id")
            continue

        inputbuf = node.find("inputbuf")
        query = _text_or_none(
            "".join(inputbuf.itertext()) if inputbuf is not None else None
        )

        if process_id in victim_ids:
            role = ProcessRole.VICTIM
        else:
            role = ProcessRole.BLOCKER

        processes.append(
            ProcessRecord(
                process_id=process_id,
                session_id=_parse_session_id(node.get("spid")),
                role=role,
                query=query or NOT_AVAILABLE,
                resource_ids=_resources_for_process(process_id, resources),
            )
        )
    return processes


def extract_graph(deadlock: Element) -> DeadlockGraph:
    """Extract one <deadlock> node."""
    victim_ids = extract_victim_ids(deadlock)
    resources = extract_resources(deadlock)
    processes = extract_processes(deadlock, victim_ids, resources)
    return DeadlockGraph(processes=tuple(processes), resources=tuple(resources))


def extract_event(event: DeadlockEvent) -> list[DeadlockGraph]:
    """
    Extract every deadlock graph carried by an event.

    Args:
        event: Deadlock report read from a trace source

    Returns:
        One DeadlockGraph per <deadlock> node, in document order

    Raises:
        MalformedEventError: If the payload holds no deadlock graph or a
            graph has no victim-list
    """
    deadlocks = list(event.payload.iter("deadlock"))
    if not deadlocks:
        raise MalformedEventError(
            f"Deadlock report at {event.timestamp} has no <deadlock> graph",
            event=event,
        )

    graphs = []
    for deadlock in deadlocks:
        try:
            graphs.append(extract_graph(deadlock))
        except MalformedEventError as e:
            raise MalformedEventError(
                f"Deadlock report at {event.timestamp}: {e}", event=event
            ) from e
    return graphs
