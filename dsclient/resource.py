#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""resource - Resource snapshots of servers

This module has two classes:
  1. `Resource`, the (cores, memory, disk, pending jobs) snapshot of a
     server at the time it was queried
  2. `ResourceAccountant`, which derives snapshots from server records,
     correcting the waiting job count reported for booting servers
"""

import logging
from typing import NamedTuple

import numpy as np

from .job import Job, JobStatus
from .server import Server

logger = logging.getLogger(__name__)


class Resource(NamedTuple):
    """Resources available on a server, and jobs still pending on it."""

    available_cores: int
    available_memory: int
    available_disk: int
    pending_jobs: int

    @staticmethod
    def of(server: Server, pending_jobs: int = None) -> 'Resource':
        """Snapshot of the reported fields of a server, clamped at zero."""
        if pending_jobs is None:
            pending_jobs = server.waiting_jobs
        return Resource(
            max(server.core, 0),
            max(server.memory, 0),
            max(server.disk, 0),
            max(pending_jobs, 0),
        )

    def fits(self, core: int, memory: int, disk: int) -> bool:
        """Whether a demand fits the available resources."""
        return self.available_cores >= core and \
            self.available_memory >= memory and \
            self.available_disk >= disk

    def ratios(self, job: Job) -> np.ndarray:
        """Available resources divided by the demand of ``job``."""
        return np.array(self[:3], dtype=float) / np.array(job.demand)

    def credit(self, job: Job) -> 'Resource':
        """A new snapshot with the resources of ``job`` given back."""
        return self._replace(
            available_cores=self.available_cores + job.core,
            available_memory=self.available_memory + job.memory,
            available_disk=self.available_disk + job.disk,
        )

    def debit(self, job: Job) -> 'Resource':
        """A new snapshot with the resources of ``job`` taken."""
        if not self.fits(*job.demand):
            raise AssertionError(f'Unable to take resources for {job}')
        return self._replace(
            available_cores=self.available_cores - job.core,
            available_memory=self.available_memory - job.memory,
            available_disk=self.available_disk - job.disk,
        )


class ResourceAccountant:
    """Computes resource snapshots of servers.

    The simulator reports available (not total) capacity in its live
    records, so the baseline snapshot is the record itself. While a server
    is booting, its waiting job counter also includes jobs that were already
    given a start time for when the boot completes; those are not really
    pending, and are discounted after listing the server's jobs.

    Parameters
    ----------
        catalog : ServerCatalog
            Used to list the jobs of booting servers
    """

    def __init__(self, catalog):
        self.catalog = catalog

    def utilisation(self, server: Server, jobs=None) -> Resource:
        """Returns the resource snapshot of ``server``.

        Parameters
        ----------
            server : Server
                The server, as last reported by the simulator
            jobs : Optional[List[Job]]
                The job list of the server, if the caller already has it.
                Only consulted for booting servers.
        """
        pending = server.waiting_jobs
        if server.booting and pending > 0:
            if jobs is None:
                jobs = self.catalog.list_jobs(server)
            admitted = sum(
                1 for j in jobs
                if j.status == JobStatus.WAITING and j.has_start_time
            )
            if admitted:
                logger.debug(
                    '%s is booting with %d of %d waiting jobs already '
                    'admitted', server, admitted, pending
                )
            pending -= admitted
        return Resource.of(server, pending)
