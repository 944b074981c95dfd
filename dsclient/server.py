#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""server - Servers as reported by the simulator.

A server is identified by its type (a category shared by many instances) and
an ID that is unique within that type. The simulator describes servers in
two record shapes (see :class:`RecordFormat`), and status notifications name
servers only by identity, which gives us a third, skeletal, form.
"""

import enum
from typing import NamedTuple, Tuple

from .errors import ProtocolError

UNKNOWN = -1


class ServerState(enum.Enum):
    """States a server can be in, as spelled on the wire."""

    INACTIVE = 'inactive'
    BOOTING = 'booting'
    IDLE = 'idle'
    ACTIVE = 'active'
    UNAVAILABLE = 'unavailable'
    UNKNOWN = 'unknown'

    @staticmethod
    def from_str(state: str):
        try:
            return ServerState(state.lower())
        except ValueError as e:
            raise ProtocolError(f'{state} is not a valid server state.') from e


class RecordFormat(enum.IntEnum):
    """Shapes of a server record.

    * ``LIVE``: answer to ``GETS`` queries,
      ``type id state curStartTime core mem disk wJobs rJobs``, possibly
      followed by failure statistics we do not use.
    * ``SNAPSHOT``: full static snapshot,
      ``type id state curStartTime core mem disk bootTime hourlyRate``.
    """

    LIVE = 0
    SNAPSHOT = 1


class Server:
    """A server in the simulated system.

    Capacity fields hold what the simulator last reported. For ``LIVE``
    records these are the currently *available* resources, not the totals;
    totals live in the per-type template kept by
    :class:`dsclient.catalog.ServerCatalog`.

    Parameters
    ----------
        server_type : str
            Type (category) name of the server
        server_id : int
            ID of the server within its type
        state : ServerState
            Last state reported by the simulator
        cur_start_time : int
            Time the server last started, -1 if never
        core, memory, disk : int
            Reported capacity, ``UNKNOWN`` on skeletal references
        boot_time : int
            Time it takes to boot an instance of this type
        hourly_rate : float
            Cost of an active hour on this server
        waiting_jobs : int
            Number of jobs waiting on this server
        running_jobs : int
            Number of jobs running on this server
    """

    def __init__(
        self,
        server_type,
        server_id,
        state=ServerState.UNKNOWN,
        cur_start_time=UNKNOWN,
        core=UNKNOWN,
        memory=UNKNOWN,
        disk=UNKNOWN,
        boot_time=UNKNOWN,
        hourly_rate=float(UNKNOWN),
        waiting_jobs=0,
        running_jobs=0,
    ):
        self.type: str = server_type
        self.id: int = server_id
        self.state: ServerState = state
        self.cur_start_time: int = cur_start_time
        self.core: int = core
        self.memory: int = memory
        self.disk: int = disk
        self.boot_time: int = boot_time
        self.hourly_rate: float = hourly_rate
        self.waiting_jobs: int = waiting_jobs
        self.running_jobs: int = running_jobs

    def __str__(self):
        return f'{self.type} {self.id}'

    def __repr__(self):
        return (
            f'Server<{self.type} {self.id}, {self.state.value}, '
            f'core={self.core}, memory={self.memory}, disk={self.disk}, '
            f'waiting={self.waiting_jobs}, running={self.running_jobs}>'
        )

    @property
    def key(self) -> Tuple[str, int]:
        """Identity of this server."""
        return self.type, self.id

    @property
    def booting(self) -> bool:
        return self.state is ServerState.BOOTING

    @property
    def skeletal(self) -> bool:
        """Whether this is a bare reference with no known capacity."""
        return self.core == UNKNOWN

    def can_hold(self, core: int, memory: int, disk: int) -> bool:
        """Checks a demand against the reported capacity of this server."""
        return self.core >= core and self.memory >= memory \
            and self.disk >= disk

    def enrich(self, template) -> 'Server':
        """Fills fields still unknown with the values of a type template.

        Values reported by the simulator are never overwritten.

        Parameters
        ----------
            template : ServerTemplate
                Static description of this server's type
        """
        if template is None:
            return self
        if self.core == UNKNOWN:
            self.core = template.core
        if self.memory == UNKNOWN:
            self.memory = template.memory
        if self.disk == UNKNOWN:
            self.disk = template.disk
        if self.boot_time == UNKNOWN:
            self.boot_time = template.boot_time
        if self.hourly_rate == UNKNOWN:
            self.hourly_rate = template.hourly_rate
        return self

    def record(self, fmt: RecordFormat = RecordFormat.LIVE) -> str:
        """Serializes this server in one of the simulator's record shapes."""
        head = (
            f'{self.type} {self.id} {self.state.value} {self.cur_start_time} '
            f'{self.core} {self.memory} {self.disk}'
        )
        if fmt == RecordFormat.LIVE:
            return f'{head} {self.waiting_jobs} {self.running_jobs}'
        return f'{head} {self.boot_time} {self.hourly_rate}'

    @staticmethod
    def reference(server_type: str, server_id: int) -> 'Server':
        """Builds a skeletal server known only by identity."""
        return Server(server_type, int(server_id))

    @staticmethod
    def from_record(line: str, fmt: RecordFormat = RecordFormat.LIVE):
        """Parses a server record.

        Parameters
        ----------
            line : str
                The record, as received from the simulator
            fmt : RecordFormat
                Which record shape to expect

        Raises:
            ProtocolError: if the line is not a record of the given shape.
        """
        fields = line.split()
        if len(fields) < 9 or (fmt == RecordFormat.SNAPSHOT
                               and len(fields) != 9):
            raise ProtocolError(f'Malformed server record {line!r}')
        try:
            server = Server(
                fields[0],
                int(fields[1]),
                ServerState.from_str(fields[2]),
                *(int(f) for f in fields[3:7]),
            )
            if fmt == RecordFormat.LIVE:
                server.waiting_jobs = int(fields[7])
                server.running_jobs = int(fields[8])
            else:
                server.boot_time = int(fields[7])
                server.hourly_rate = float(fields[8])
        except ValueError as e:
            raise ProtocolError(f'Malformed server record {line!r}') from e
        return server


class ServerTemplate(NamedTuple):
    """Static description of a server type.

    Immutable; :class:`dsclient.catalog.ServerCatalog` keeps the first one
    seen for each type.
    """

    type: str
    limit: int
    boot_time: int
    hourly_rate: float
    core: int
    memory: int
    disk: int

    @staticmethod
    def from_server(server: Server) -> 'ServerTemplate':
        """Builds a template out of the first record seen for a type."""
        return ServerTemplate(
            server.type,
            UNKNOWN,
            server.boot_time,
            server.hourly_rate,
            server.core,
            server.memory,
            server.disk,
        )

    @property
    def cost_per_core(self) -> float:
        """Hourly rate divided by core count, infinite when unknown."""
        if self.hourly_rate < 0 or self.core <= 0:
            return float('inf')
        return self.hourly_rate / self.core
