#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""config - Connection settings and run options.

Settings come from the environment (and thus from an optional ``.env``
file, see :mod:`dsclient.cli`); run options are fixed at session start and
never change during a run.
"""

import os
from typing import NamedTuple

from .predictor import PredictionMode
from .scheduler import FitnessMode


def _default_user() -> str:
    return os.getenv('USER') or os.getenv('USERNAME') or 'dsclient'


class Settings:
    host = os.getenv('DS_HOST', 'localhost')
    port = int(os.getenv('DS_PORT', '50000'))
    user = os.getenv('DS_USER', _default_user())
    manifest = os.getenv('DS_MANIFEST', 'ds-system.xml')
    log_file = os.getenv('DS_LOG_FILE', 'log.txt')

    @classmethod
    def read_environments(cls):
        cls.host = os.getenv('DS_HOST', 'localhost')
        cls.port = int(os.getenv('DS_PORT', '50000'))
        cls.user = os.getenv('DS_USER', _default_user())
        cls.manifest = os.getenv('DS_MANIFEST', 'ds-system.xml')
        cls.log_file = os.getenv('DS_LOG_FILE', 'log.txt')


class ClientOptions(NamedTuple):
    """Switches selecting the behaviour of a run."""

    policy: str = 'best-fit'
    prediction: PredictionMode = PredictionMode.EXACT
    fitness: FitnessMode = FitnessMode.BALANCED
    booting_available: bool = True
    terminate_idle: bool = False
    gets_all: bool = False
