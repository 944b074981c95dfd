#!/usr/bin/env python
# -*- coding: utf-8 -*-

__version__ = '0.1.0'

from .errors import (
    ClientError,
    ProtocolError,
    UnsatisfiableJobError,
    ManifestError,
)
from .session import ProtocolSession
from .catalog import ServerCatalog
from .engine import SchedulingEngine, build_scheduler
from .loop import SessionLoop, JobFeed

__all__ = [
    'ClientError',
    'ProtocolError',
    'UnsatisfiableJobError',
    'ManifestError',
    'ProtocolSession',
    'ServerCatalog',
    'SchedulingEngine',
    'build_scheduler',
    'SessionLoop',
    'JobFeed',
]
