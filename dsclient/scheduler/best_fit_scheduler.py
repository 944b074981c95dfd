#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""best_fit_scheduler - A best-fit bin packing policy"""

import enum
from typing import Optional, Sequence

import numpy as np

from dsclient.job import Job
from dsclient.resource import Resource
from dsclient.server import Server
from dsclient.scheduler.scheduler import Scheduler, logger


class FitnessMode(enum.IntEnum):
    """How tight a fit is measured."""

    CORE_ONLY = 0
    BALANCED = 1

    @staticmethod
    def from_str(mode: str):
        mode = mode.upper().replace('-', '_')
        if mode in FitnessMode.__members__:
            return FitnessMode[mode]
        raise ValueError(f'{mode} is not a valid FitnessMode.')


class BestFitScheduler(Scheduler):
    """Dispatches each job to the qualifying server it fits most tightly.

    Parameters
    ----------
        fitness : FitnessMode
            ``CORE_ONLY`` ranks candidates by available cores, ``BALANCED``
            by the sum of the available to requested ratios of cores, memory
            and disk. Lower is tighter in both cases.

    The remaining parameters are those of
    :class:`dsclient.scheduler.Scheduler`.
    """

    fitness_mode: FitnessMode

    def __init__(self, *args, fitness=FitnessMode.BALANCED, **kwargs):
        super().__init__(*args, **kwargs)
        self.fitness_mode = fitness

    def fitness(self, job: Job, resource: Resource) -> float:
        """Computes the fitness statistic of a snapshot for ``job``."""
        if self.fitness_mode == FitnessMode.CORE_ONLY:
            return float(resource.available_cores)
        return float(np.sum(resource.ratios(job)))

    def score(self, job: Job, candidates: Sequence[Server]) -> Optional[Server]:
        qualified = self.qualifying(job, candidates)
        if not qualified:
            return None
        fitness = np.array([self.fitness(job, r) for _, r in qualified])
        server = qualified[int(np.argmin(fitness))][0]
        logger.info(
            'Job %d: best fit %s (fitness %.3f)', job.id, server, fitness.min()
        )
        return server
