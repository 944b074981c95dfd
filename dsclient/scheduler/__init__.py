#!/usr/bin/env python
# -*- coding: utf-8 -*-

"scheduler - server selection policies for the scheduling engine."

from .scheduler import Scheduler
from .best_fit_scheduler import BestFitScheduler, FitnessMode
from .cheapest_scheduler import CheapestScheduler
from .largest_scheduler import LargestScheduler, largest_first

__all__ = [
    'Scheduler',
    'BestFitScheduler',
    'FitnessMode',
    'CheapestScheduler',
    'LargestScheduler',
    'largest_first',
]
