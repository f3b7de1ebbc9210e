"""Widget data orchestration.

The CLI (and any future entry-point, e.g. an HTTP handler) asks this module
for the dashboard numbers instead of talking to the counting client
directly. Side-effects such as printing stay out of here.
"""

from __future__ import annotations

import logging

from core.domain.models import AggregateCounts
from core.interfaces.counter import CountingClient

logger = logging.getLogger(__name__)


def fetch_counts(counter: CountingClient) -> AggregateCounts:
    """Run the three counts sequentially and build `AggregateCounts`.

    Any failure propagates unchanged; there is no partial result.
    """

    applications = counter.count_applications()
    clients = counter.count_clients()
    messages = counter.count_messages()

    counts = AggregateCounts(applications=applications, clients=clients, messages=messages)
    logger.debug("widget counts: %s", counts.model_dump())
    return counts
