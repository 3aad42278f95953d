"""
Blocker/victim correlation.

Within each deadlock graph, every Blocker process is joined to every Victim
process on shared resource ids. Each (blocker, victim, resource) match is
reported from the victim's side: its query, and the object and lock it was
waiting on. Rows are then deduplicated on the full output tuple, restricted
to the requested time window and ordered by event time and blocker session.
"""

from collections.abc import Iterable
from datetime import datetime

from xedeadlock.models.records import DeadlockGraph
from xedeadlock.models.report import CorrelatedPair


def correlate_graph(graph: DeadlockGraph, event_time: datetime) -> list[CorrelatedPair]:
    """
    Join blockers to victims on shared resources within one graph.

    A graph with no victims produces no rows. A blocker and victim sharing
    several resources produce one row per shared resource.

    Args:
        graph: Extracted deadlock graph
        event_time: Timestamp of the event the graph belongs to

    Returns:
        Pairs in blocker, victim, resource-id order (not deduplicated)
    """
    victims = graph.victims
    if not victims:
        return []

    resources = graph.resources_by_id
    pairs = []

    for blocker in graph.blockers:
        for victim in victims:
            for resource_id in sorted(blocker.resource_ids & victim.resource_ids):
                resource = resources[resource_id]
                pairs.append(
                    CorrelatedPair(
                        event_time=event_time,
                        blocker_session=blocker.session_id,
                        victim_session=victim.session_id,
                        query=victim.query,
                        locked_object=resource.object_name,
                        lock_mode=resource.lock_mode,
                        lock_type=resource.lock_type,
                    )
                )
    return pairs


def deduplicate(pairs: Iterable[CorrelatedPair]) -> list[CorrelatedPair]:
    """Drop repeated rows, keeping the first occurrence of each."""
    return list(dict.fromkeys(pairs))


def filter_window(
    pairs: Iterable[CorrelatedPair],
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> list[CorrelatedPair]:
    """
    Keep pairs whose event time lies within [start_time, end_time].

    Either bound may be None, meaning unbounded on that side.
    """
    return [
        p
        for p in pairs
        if (start_time is None or p.event_time >= start_time)
        and (end_time is None or p.event_time <= end_time)
    ]


def sort_pairs(pairs: Iterable[CorrelatedPair]) -> list[CorrelatedPair]:
    """
    Order by event time, then blocker session.

    Unknown blocker sessions sort first, as NULLs do in a SQL Server
    ORDER BY. The sort is stable, so ties keep first-seen order.
    """
    return sorted(
        pairs,
        key=lambda p: (
            p.event_time,
            p.blocker_session is not None,
            p.blocker_session or 0,
        ),
    )


def correlate(
    graphs: Iterable[tuple[datetime, DeadlockGraph]],
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> list[CorrelatedPair]:
    """
    Run the full correlation over extracted graphs.

    Args:
        graphs: (event time, graph) for every extracted deadlock graph
        start_time: Optional inclusive lower bound
        end_time: Optional inclusive upper bound

    Returns:
        Deduplicated, filtered and sorted pairs
    """
    pairs: list[CorrelatedPair] = []
    for event_time, graph in graphs:
        pairs.extend(correlate_graph(graph, event_time))

    return sort_pairs(filter_window(deduplicate(pairs), start_time, end_time))
