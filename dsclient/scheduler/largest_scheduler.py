#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""largest_scheduler - Send everything to the largest server"""

from typing import Callable, Optional, Sequence, Tuple

from dsclient.job import Job
from dsclient.server import Server
from dsclient.scheduler.scheduler import Scheduler, logger


def largest_first(server: Server, core: int = None) -> Tuple[int, int]:
    """Orders servers by core count, descending, then by ID, ascending.

    Parameters
    ----------
        server : Server
            The server to order
        core : Optional[int]
            Total core count of the server's type. Defaults to the count
            the simulator reported, which live records give as *available*
            cores.
    """
    if core is None:
        core = server.core
    return -core, server.id


class LargestScheduler(Scheduler):
    """All-to-largest: every job goes to the first server in ``order``.

    Servers are ranked by the static capacity of their type, taken from the
    catalog templates, so a busy large server still beats an idle small one.
    This ignores load entirely and never needs the predictor.

    Parameters
    ----------
        order : Callable[[Server, int], Any]
            Key function ordering the candidates given their total core
            count, first one wins
    """

    order: Callable[[Server, int], Tuple[int, int]]

    def __init__(self, *args, order=largest_first, **kwargs):
        super().__init__(*args, **kwargs)
        self.order = order

    def capacity(self, server: Server) -> int:
        """Total core count of the type of ``server``."""
        template = None
        if self.catalog is not None:
            template = self.catalog.template_for(server.type)
        if template is not None and template.core > 0:
            return template.core
        return server.core

    def score(self, job: Job, candidates: Sequence[Server]) -> Optional[Server]:
        server = min(
            candidates, key=lambda s: self.order(s, self.capacity(s))
        )
        logger.info(
            'Job %d: largest server %s (%d cores)',
            job.id, server, self.capacity(server)
        )
        return server
