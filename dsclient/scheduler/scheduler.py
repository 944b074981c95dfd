#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""scheduler - Module with basic scheduling functionality.

A scheduling policy picks one server, out of the servers capable of running
a job, to dispatch that job to. Policies share two steps:

* *scoring* the candidates that could start the job right away, and
* falling back to the :class:`dsclient.predictor.AvailabilityPredictor`
  when no candidate qualifies, picking the one that frees up soonest.

Ties are always broken by candidate order, which is the order the simulator
listed the servers in.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from dsclient.job import Job
from dsclient.resource import Resource
from dsclient.server import Server

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Base class for scheduling policies.

    Parameters
    ----------
        accountant : Optional[ResourceAccountant]
            Computes resource snapshots of candidates
        predictor : Optional[AvailabilityPredictor]
            Used when no candidate can take the job right now
        catalog : Optional[ServerCatalog]
            Source of per-type templates (static capacity, hourly rate)
        booting_available : bool
            Whether booting servers are scored alongside servers with an
            empty waiting queue
    """

    def __init__(
        self,
        accountant=None,
        predictor=None,
        catalog=None,
        booting_available=True,
    ):
        self.accountant = accountant
        self.predictor = predictor
        self.catalog = catalog
        self.booting_available = booting_available

    def choose_server(
        self,
        job: Job,
        candidates: Sequence[Server],
        on_fallback: Optional[Callable[[], None]] = None,
    ) -> Server:
        """Chooses the server ``job`` should be dispatched to.

        Parameters
        ----------
            job : Job
                The job to place
            candidates : Sequence[Server]
                Servers capable of running the job, never empty
            on_fallback : Optional[Callable[[], None]]
                Called before falling back to the predictor
        """
        server = self.score(job, candidates)
        if server is None:
            if on_fallback is not None:
                on_fallback()
            server = self.fallback(job, candidates)
        return server

    @abstractmethod
    def score(self, job: Job, candidates: Sequence[Server]) -> Optional[Server]:
        """Picks a server that can take the job now, None if there's none."""

    def scored(self, server: Server) -> bool:
        """Whether a candidate is worth a resource snapshot at all."""
        return (self.booting_available and server.booting) \
            or server.waiting_jobs == 0

    def qualifying(
        self, job: Job, candidates: Sequence[Server]
    ) -> List[Tuple[Server, Resource]]:
        """Candidates that can start ``job`` right now, with their snapshot.

        A candidate qualifies when nothing is pending on it and its available
        resources meet the demand of the job.
        """
        if self.accountant is None:
            raise AssertionError('Scoring requires a resource accountant')
        qualified = []
        for server in filter(self.scored, candidates):
            resource = self.accountant.utilisation(server)
            if resource.pending_jobs == 0 and resource.fits(*job.demand):
                qualified.append((server, resource))
        return qualified

    def statically_capable(self, server: Server, job: Job) -> bool:
        """Whether the type of ``server`` could ever hold ``job``."""
        template = None
        if self.catalog is not None:
            template = self.catalog.template_for(server.type)
        if template is not None and template.core > 0:
            return template.core >= job.core \
                and template.memory >= job.memory \
                and template.disk >= job.disk
        return server.can_hold(*job.demand)

    def fallback(self, job: Job, candidates: Sequence[Server]) -> Server:
        """Picks the candidate predicted to have room for ``job`` soonest."""
        if self.predictor is None:
            raise AssertionError('Falling back requires a predictor')
        eligible = [s for s in candidates if self.statically_capable(s, job)]
        if not eligible:
            eligible = list(candidates)
        times = np.array([self.predictor.predict(s, job) for s in eligible])
        server = eligible[int(np.argmin(times))]
        logger.info(
            'Job %d: no server free, %s predicted free at %d',
            job.id, server, times.min()
        )
        return server
