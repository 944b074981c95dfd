#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""loop - The ``REDY`` loop driving a session.

After every ``REDY`` the simulator answers with exactly one of:

* a job offer (``JOBN``, ``JOBP``), which must be dispatched before the next
  ``REDY``,
* a status notification (``JCPL``, ``RESF``, ``RESR``), after which we may
  react and then ask again,
* ``NONE``, meaning no jobs are left.

Anything else ends the session: we cannot tell what state the simulator is
in, and guessing risks dispatching a job twice.
"""

import logging
from typing import Callable, NamedTuple, Optional

from .catalog import ServerCatalog
from .engine import SchedulingEngine
from .errors import ProtocolError, UnsatisfiableJobError
from .job import Job, OFFER_TYPES
from .server import Server, ServerState
from .session import ProtocolSession

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ('JCPL', 'RESF', 'RESR')
NO_MORE_JOBS = 'NONE'


class StatusNotification(NamedTuple):
    """An asynchronous notification about a job or a server.

    ``job_id`` is only set for job completions (``JCPL``).
    """

    kind: str
    time: int
    server: Server
    job_id: Optional[int] = None

    @staticmethod
    def parse(line: str) -> 'StatusNotification':
        """Parses ``JCPL``, ``RESF`` and ``RESR`` messages.

        The formats are ``JCPL <endTime> <jobID> <type> <serverID>``,
        ``RESF <type> <serverID> <time>`` and
        ``RESR <type> <serverID> <time>``.
        """
        fields = line.split()
        try:
            if fields[0] == 'JCPL':
                return StatusNotification(
                    fields[0],
                    int(fields[1]),
                    Server.reference(fields[3], int(fields[4])),
                    int(fields[2]),
                )
            if fields[0] in NOTIFICATION_TYPES:
                return StatusNotification(
                    fields[0],
                    int(fields[3]),
                    Server.reference(fields[1], int(fields[2])),
                )
        except (IndexError, ValueError) as e:
            raise ProtocolError(f'Malformed notification {line!r}') from e
        raise ProtocolError(f'Not a status notification {line!r}')


class JobFeed:
    """Pulls jobs out of the session, one ``REDY`` at a time.

    Parameters
    ----------
        session : ProtocolSession
            The connected session
        listener : Optional[Callable[[StatusNotification], None]]
            Called with every status notification received on the way to the
            next job
    """

    listener: Optional[Callable[[StatusNotification], None]]

    def __init__(self, session, listener=None):
        self.session = session
        self.listener = listener

    def next_job(self) -> Optional[Job]:
        """Returns the next job to dispatch, or None at the end of the
        session."""
        while True:
            reply = self.session.request('REDY')
            kind = reply.split(' ', 1)[0]
            if kind in NOTIFICATION_TYPES:
                notification = StatusNotification.parse(reply)
                logger.debug('Notification %s', notification)
                if self.listener is not None:
                    self.listener(notification)
                continue
            if kind in OFFER_TYPES:
                return Job.from_offer(reply)
            if reply == NO_MORE_JOBS:
                logger.info('No more jobs')
                return None
            logger.error("Unexpected response to 'REDY': %r", reply)
            return None


class RunSummary:
    """Counters describing a finished run."""

    def __init__(self):
        self.dispatched = 0
        self.unsatisfiable = 0
        self.notifications = 0
        self.terminated = 0

    def __repr__(self):
        return (
            f'RunSummary(dispatched={self.dispatched}, '
            f'unsatisfiable={self.unsatisfiable}, '
            f'notifications={self.notifications}, '
            f'terminated={self.terminated})'
        )


class SessionLoop:
    """Schedules every job of a session.

    Parameters
    ----------
        session : ProtocolSession
            A session that already completed its handshake
        engine : SchedulingEngine
            Chooses the server of every job
        terminate_idle : bool
            Whether to terminate servers left idle by a job completion
    """

    session: ProtocolSession
    engine: SchedulingEngine
    catalog: ServerCatalog
    summary: RunSummary

    def __init__(self, session, engine, terminate_idle=False):
        self.session = session
        self.engine = engine
        self.catalog = engine.catalog
        self.terminate_idle = terminate_idle
        self.summary = RunSummary()
        self.feed = JobFeed(session, self.on_notification)

    def run(self) -> RunSummary:
        """Runs until the simulator runs out of jobs.

        The session is always closed on the way out, with a best-effort
        ``QUIT``. Protocol and I/O errors propagate after that.
        """
        try:
            job = self.feed.next_job()
            while job is not None:
                try:
                    server = self.engine.schedule(job)
                except UnsatisfiableJobError as e:
                    logger.error('%s', e)
                    self.summary.unsatisfiable += 1
                else:
                    self.dispatch(job, server)
                job = self.feed.next_job()
        finally:
            self.session.disconnect()
        logger.info('Session finished: %s', self.summary)
        return self.summary

    def dispatch(self, job: Job, server: Server) -> None:
        """Sends the scheduling decision for ``job``."""
        self.session.expect(f'SCHD {job.id} {server.type} {server.id}')
        self.summary.dispatched += 1
        logger.info('Job %d dispatched to %s', job.id, server)

    def on_notification(self, notification: StatusNotification) -> None:
        self.summary.notifications += 1
        if notification.kind == 'JCPL' and self.terminate_idle:
            self.terminate_if_idle(notification.server)

    def terminate_if_idle(self, reference: Server) -> bool:
        """Terminates a server if it has nothing left to do.

        Parameters
        ----------
            reference : Server
                The server, possibly a skeletal reference; its current state
                is queried before deciding.

        Returns:
            bool: Whether the server was terminated.
        """
        server = next(
            (s for s in self.catalog.list_by_type(reference.type)
             if s.id == reference.id),
            None,
        )
        if server is None or server.state is not ServerState.IDLE \
                or server.waiting_jobs or server.running_jobs:
            return False
        reply = self.session.request(f'TERM {server.type} {server.id}')
        self.summary.terminated += 1
        logger.info('Terminated idle server %s: %s', server, reply)
        return True
