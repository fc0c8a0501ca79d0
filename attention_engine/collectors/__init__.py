"""
Collectors: independent producers of draft attention items.
"""

from typing import List

from sqlalchemy.orm import sessionmaker

from attention_engine.collectors.base import (
    Collector,
    CollectorResult,
    run_collectors,
)
from attention_engine.collectors.lists import ListSuggestionsCollector
from attention_engine.collectors.notifications import NotificationsCollector
from attention_engine.collectors.projects import (
    AlignmentCollector,
    DeliverablesCollector,
    ProjectActivityCollector,
    ProjectsCollector,
)
from attention_engine.collectors.remote import HttpCollector
from attention_engine.collectors.sql import SqlCollector
from attention_engine.collectors.trade_queue import TradeQueueCollector


def default_collectors(session_factory: sessionmaker) -> List[Collector]:
    """The built-in SQL collectors, all sharing one session factory."""
    return [
        DeliverablesCollector(session_factory),
        ProjectsCollector(session_factory),
        ProjectActivityCollector(session_factory),
        AlignmentCollector(session_factory),
        TradeQueueCollector(session_factory),
        ListSuggestionsCollector(session_factory),
        NotificationsCollector(session_factory),
    ]


__all__ = [
    "Collector",
    "CollectorResult",
    "run_collectors",
    "SqlCollector",
    "HttpCollector",
    "DeliverablesCollector",
    "ProjectsCollector",
    "ProjectActivityCollector",
    "AlignmentCollector",
    "TradeQueueCollector",
    "ListSuggestionsCollector",
    "NotificationsCollector",
    "default_collectors",
]
