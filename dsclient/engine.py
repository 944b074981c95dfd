#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""engine - From a job to the server it should be dispatched to.

Each job goes through the states of :class:`EngineState`::

    NEED_CANDIDATES -> SCORING -> ASSIGNED
                               -> NEED_PREDICTION -> ASSIGNED
"""

import enum
import logging

from .catalog import ServerCatalog
from .config import ClientOptions
from .errors import UnsatisfiableJobError
from .job import Job
from .predictor import AvailabilityPredictor
from .resource import ResourceAccountant
from .server import Server
from .scheduler import (
    Scheduler,
    BestFitScheduler,
    CheapestScheduler,
    LargestScheduler,
)

logger = logging.getLogger(__name__)


class EngineState(enum.IntEnum):
    NEED_CANDIDATES = 0
    SCORING = 1
    NEED_PREDICTION = 2
    ASSIGNED = 3


POLICIES = {
    'best-fit': BestFitScheduler,
    'cheapest': CheapestScheduler,
    'largest': LargestScheduler,
}


def build_scheduler(catalog: ServerCatalog, options: ClientOptions) \
        -> Scheduler:
    """Builds the scheduling policy selected for a run."""
    if options.policy not in POLICIES:
        raise ValueError(
            f'{options.policy} is not a valid policy. '
            f'Valid options are: {list(POLICIES)}.'
        )
    accountant = ResourceAccountant(catalog)
    predictor = AvailabilityPredictor(
        catalog, accountant, options.prediction
    )
    kwargs = {
        'accountant': accountant,
        'predictor': predictor,
        'catalog': catalog,
        'booting_available': options.booting_available,
    }
    if options.policy == 'best-fit':
        kwargs['fitness'] = options.fitness
    return POLICIES[options.policy](**kwargs)


class SchedulingEngine:
    """Chooses a server for every job, using one policy for the whole run.

    Parameters
    ----------
        catalog : ServerCatalog
            Source of the capable servers for a job
        policy : Scheduler
            The policy that picks among them
    """

    catalog: ServerCatalog
    policy: Scheduler
    state: EngineState

    def __init__(self, catalog, policy):
        self.catalog = catalog
        self.policy = policy
        self.state = EngineState.ASSIGNED

    def _enter(self, state: EngineState, job: Job) -> None:
        logger.debug('Job %d: %s', job.id, state.name)
        self.state = state

    def schedule(self, job: Job) -> Server:
        """Chooses the server ``job`` should run on.

        Raises:
            UnsatisfiableJobError: if no server can ever run the job. The
            server population doesn't change during a run, so this is not
            worth retrying.
        """
        self._enter(EngineState.NEED_CANDIDATES, job)
        candidates = self.catalog.list_capable(*job.demand)
        if not candidates:
            raise UnsatisfiableJobError(job)

        self._enter(EngineState.SCORING, job)
        server = self.policy.choose_server(
            job,
            candidates,
            on_fallback=lambda: self._enter(EngineState.NEED_PREDICTION, job),
        )

        self._enter(EngineState.ASSIGNED, job)
        return server
