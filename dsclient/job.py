#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""job - Classes for jobs handed out by the simulator.
"""

import enum

from typing import List

from .errors import ProtocolError

UNKNOWN = -1
'Sentinel for times the simulator has not told us about yet.'

OFFER_TYPES = ('JOBN', 'JOBP')


class JobStatus(enum.IntEnum):
    """An enumeration of job states, using the simulator's integer codes."""

    SUBMITTED = 0
    WAITING = 1
    RUNNING = 2
    SUSPENDED = 3
    COMPLETED = 4
    PREEMPTED = 5
    FAILED = 6
    KILLED = 7


def _integers(fields: List[str], line: str) -> List[int]:
    try:
        return [int(f) for f in fields]
    except ValueError as e:
        raise ProtocolError(f'Non-integer field in job record {line!r}') from e


class Job:
    """A job in the system.

    Jobs reach the client in two shapes: as an offer (``JOBN``/``JOBP``) that
    must be dispatched, and as a record of a server's job listing (``LSTJ``).
    The initializer arguments follow the fields of the offer.

    Only the :class:`dsclient.predictor.AvailabilityPredictor` mutates jobs,
    and only copies it obtained from a listing.

    Parameters
    ----------
        job_id : int
            Identifier assigned by the simulator
        submit_time : int
            Simulated time at which the job was submitted
        est_runtime : int
            Estimated run time of the job
        core : int
            Number of cores requested
        memory : int
            Amount of memory requested
        disk : int
            Amount of disk requested
        status : JobStatus
            Current state of the job
        start_time : int
            Simulated start time, or ``UNKNOWN`` if not yet scheduled
    """

    def __init__(
        self,
        job_id,
        submit_time=UNKNOWN,
        est_runtime=0,
        core=1,
        memory=1,
        disk=1,
        status=JobStatus.SUBMITTED,
        start_time=UNKNOWN,
    ):
        if core <= 0 or memory <= 0 or disk <= 0:
            raise ValueError(
                f'Job {job_id} has a non-positive resource demand'
            )
        self.id: int = job_id
        self.submit_time: int = submit_time
        self.est_runtime: int = est_runtime
        self.core: int = core
        self.memory: int = memory
        self.disk: int = disk
        self.status: JobStatus = status
        self.start_time: int = start_time

    def __str__(self):
        return (
            f'Job<{self.id}, {self.status.name}, start={self.start_time}, '
            f'core={self.core}, memory={self.memory}, disk={self.disk}, '
            f'runtime={self.est_runtime}>'
        )

    __repr__ = __str__

    @property
    def end_time(self) -> int:
        """Estimated end time of the job, ``UNKNOWN`` if it hasn't started."""
        if self.start_time == UNKNOWN:
            return UNKNOWN
        return self.start_time + self.est_runtime

    @property
    def has_start_time(self) -> bool:
        return self.start_time != UNKNOWN

    @property
    def demand(self):
        "The (core, memory, disk) triple requested by this job."
        return self.core, self.memory, self.disk

    @property
    def offer(self) -> str:
        """Returns the ``JOBN`` representation of this job."""
        return (
            f'JOBN {self.submit_time} {self.id} {self.est_runtime} '
            f'{self.core} {self.memory} {self.disk}'
        )

    @property
    def listing(self) -> str:
        """Returns the ``LSTJ`` record representation of this job."""
        return (
            f'{self.id} {int(self.status)} {self.start_time} '
            f'{self.est_runtime} {self.core} {self.memory} {self.disk}'
        )

    @staticmethod
    def from_offer(line: str) -> 'Job':
        """Parses a job offer.

        The offer format is
        ``JOBN <submitTime> <ID> <estRuntime> <core> <mem> <disk>`` (or
        ``JOBP`` for a job resubmitted after preemption or failure).
        """
        fields = line.split()
        if len(fields) < 7 or fields[0] not in OFFER_TYPES:
            raise ProtocolError(f'Malformed job offer {line!r}')
        submit, job_id, runtime, core, memory, disk = _integers(
            fields[1:7], line
        )
        try:
            return Job(job_id, submit, runtime, core, memory, disk)
        except ValueError as e:
            raise ProtocolError(str(e)) from e

    @staticmethod
    def from_listing(line: str) -> 'Job':
        """Parses a record of a server's job list.

        The record format is
        ``<ID> <state> <startTime> <estRuntime> <core> <mem> <disk>``.
        Newer simulator releases insert the submit time after the state;
        that eight field variant is accepted too.
        """
        fields = line.split()
        submit = UNKNOWN
        if len(fields) == 8:
            submit = _integers([fields.pop(2)], line)[0]
        if len(fields) != 7:
            raise ProtocolError(f'Malformed job record {line!r}')
        job_id, state, start, runtime, core, memory, disk = _integers(
            fields, line
        )
        try:
            status = JobStatus(state)
        except ValueError as e:
            raise ProtocolError(f'Unknown job state in {line!r}') from e
        try:
            return Job(
                job_id, submit, runtime, core, memory, disk, status, start
            )
        except ValueError as e:
            raise ProtocolError(str(e)) from e
