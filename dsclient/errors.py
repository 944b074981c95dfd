#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""errors - Exceptions raised by the client.

Connection failures (socket errors, rejected handshakes) are reported with
the built-in :class:`ConnectionError`. Everything else derives from
:class:`ClientError`.
"""


class ClientError(Exception):
    """Base class for errors raised by the ds-sim client."""


class ProtocolError(ClientError):
    """The simulator sent something we cannot make sense of.

    Raised on premature closure of the connection, malformed framing,
    unparsable records and replies of an unexpected type. Fatal for the
    query that triggered it.
    """


class UnsatisfiableJobError(ClientError):
    """No server can ever run a job.

    Parameters
    ----------
        job : Job
            The job whose demand exceeds every known server type.
    """

    def __init__(self, job):
        super().__init__(
            f'No capable server for job {job.id} '
            f'(core={job.core}, memory={job.memory}, disk={job.disk})'
        )
        self.job = job


class ManifestError(ClientError):
    """The static system manifest is missing or malformed."""
