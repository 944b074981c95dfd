#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""cheapest_scheduler - A cost-oriented policy"""

from typing import Optional, Sequence

from dsclient.job import Job
from dsclient.server import Server
from dsclient.scheduler.scheduler import Scheduler, logger


class CheapestScheduler(Scheduler):
    """Dispatches each job to the qualifying server with the lowest cost per
    core.

    Cost per core is the hourly rate of the server's type divided by its core
    count, both taken from the catalog templates; types whose rate is unknown
    rank last. Ties go to the server with fewer waiting jobs, then to
    candidate order.
    """

    def cost_per_core(self, server: Server) -> float:
        template = self.catalog.template_for(server.type) \
            if self.catalog is not None else None
        if template is None:
            return float('inf')
        return template.cost_per_core

    def score(self, job: Job, candidates: Sequence[Server]) -> Optional[Server]:
        qualified = self.qualifying(job, candidates)
        if not qualified:
            return None
        ranked = sorted(
            enumerate(qualified),
            key=lambda e: (
                self.cost_per_core(e[1][0]), e[1][0].waiting_jobs, e[0]
            ),
        )
        server = ranked[0][1][0]
        logger.info(
            'Job %d: cheapest %s (%.4f per core)',
            job.id, server, self.cost_per_core(server)
        )
        return server
