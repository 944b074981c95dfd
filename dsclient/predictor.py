#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""predictor - When will a busy server have room for a job?

Two modes are offered, and a run should stick to one of them:

* ``EXACT`` replays the server's job queue as a discrete-event simulation,
  releasing the resources of running jobs in end time order and admitting
  waiting jobs as soon as they fit, until the queue is empty and the
  requested resources are free.
* ``ESTIMATE`` asks the simulator for its own wait time estimate (``EJWT``),
  trading precision for a cheaper round trip.
"""

import enum
import logging
from typing import Iterable, List, Tuple

from .errors import ProtocolError
from .heap import Heap
from .job import Job, JobStatus
from .resource import Resource, ResourceAccountant
from .server import Server

logger = logging.getLogger(__name__)


class PredictionMode(enum.IntEnum):
    EXACT = 0
    ESTIMATE = 1

    @staticmethod
    def from_str(mode: str):
        mode = mode.upper().replace('-', '_')
        if mode in PredictionMode.__members__:
            return PredictionMode[mode]
        raise ValueError(
            f'{mode} is not a valid PredictionMode. '
            f'Valid options are: {list(PredictionMode.__members__.keys())}.'
        )


def partition(
    jobs: Iterable[Job], booting: bool = False
) -> Tuple[List[Job], List[Job]]:
    """Splits a job listing into running and waiting jobs.

    While a server boots nothing actually runs on it; jobs that were already
    given a start time will run as soon as the boot completes, so they are
    counted as running. Otherwise the reported status decides, and jobs in
    any other status are left out.
    """
    running: List[Job] = []
    waiting: List[Job] = []
    for job in jobs:
        if booting:
            (running if job.has_start_time else waiting).append(job)
        elif job.status == JobStatus.RUNNING:
            running.append(job)
        elif job.status == JobStatus.WAITING:
            waiting.append(job)
    return running, waiting


def simulate(
    jobs: Iterable[Job],
    pool: Resource,
    core: int,
    memory: int,
    disk: int,
    booting: bool = False,
) -> int:
    """Finds the first time a server has the requested resources free.

    Jobs in the listing are updated in place as they get admitted.

    Parameters
    ----------
        jobs : Iterable[Job]
            The server's job listing
        pool : Resource
            Resources available on the server right now
        core, memory, disk : int
            The resources requested
        booting : bool
            Whether the server is still booting (see :func:`partition`)

    Returns:
        int: The simulated time at which the waiting queue is empty and the
        request fits. Zero if that is already the case.

    Raises:
        ProtocolError: if jobs remain waiting, or the request still doesn't
        fit, with nothing left running to free resources. This only happens
        when the listing contradicts the server's capacity.
    """
    running_jobs, waiting = partition(jobs, booting)
    running: Heap[Job] = Heap(running_jobs, key=lambda j: j.end_time)
    waiting.sort(key=lambda j: j.id)

    time = 0
    while waiting or not pool.fits(core, memory, disk):
        if not running:
            raise ProtocolError(
                f'Inconsistent server view: {len(waiting)} jobs waiting and '
                f'{pool} available with nothing running'
            )
        finished = running.pop()
        time = max(time, finished.end_time)
        pool = pool.credit(finished)

        still_waiting = []
        for job in waiting:
            if pool.fits(*job.demand):
                pool = pool.debit(job)
                job.status = JobStatus.RUNNING
                job.start_time = time
                running.add(job)
            else:
                still_waiting.append(job)
        waiting = still_waiting
    return time


class AvailabilityPredictor:
    """Predicts when servers will have room for a job.

    Parameters
    ----------
        catalog : ServerCatalog
            Used for ``LSTJ`` and ``EJWT`` queries
        accountant : ResourceAccountant
            Computes the starting resource pool of a server
        mode : PredictionMode
            Which prediction :func:`predict` uses
    """

    accountant: ResourceAccountant
    mode: PredictionMode

    def __init__(self, catalog, accountant, mode=PredictionMode.EXACT):
        self.catalog = catalog
        self.accountant = accountant
        self.mode = mode

    def predict_available_time(
        self, server: Server, core: int, memory: int, disk: int
    ) -> int:
        """Exact prediction, simulating the server's job queue."""
        jobs = self.catalog.list_jobs(server)
        pool = self.accountant.utilisation(server, jobs)
        time = simulate(jobs, pool, core, memory, disk, server.booting)
        logger.debug('%s predicted available at %d', server, time)
        return time

    def estimated_wait_time(self, server: Server) -> int:
        """Cheap prediction, the simulator's own estimate."""
        return self.catalog.estimated_wait_time(server)

    def predict(self, server: Server, job: Job) -> int:
        """Predicts when ``server`` can take ``job``, per the chosen mode."""
        if self.mode == PredictionMode.ESTIMATE:
            return self.estimated_wait_time(server)
        return self.predict_available_time(server, *job.demand)
