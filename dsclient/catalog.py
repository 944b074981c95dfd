#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""catalog - Server and job queries against the simulator.

All list queries share the same framing::

    -> GETS Capable 2 1024 100
    <- DATA 3 124
    -> OK
    <- <record>            (three times)
    -> OK
    <- .

With a count of zero the terminator follows the first ``OK`` directly. Any
deviation is fatal for the query: the resource accounting downstream cannot
work with a partial view of the servers.
"""

import logging
from typing import Callable, Dict, List, Optional, TypeVar

from .errors import ProtocolError
from .job import Job
from .manifest import load_static_catalog
from .server import Server, ServerTemplate
from .session import ProtocolSession, ACK

logger = logging.getLogger(__name__)

T = TypeVar('T')  # pylint: disable=C

TERMINATOR = '.'


class ServerCatalog:
    """Issues catalog queries and caches per-type templates.

    Parameters
    ----------
        session : ProtocolSession
            The connected session to query through
        templates : Optional[Iterable[ServerTemplate]]
            Templates known in advance (e.g. loaded from the manifest)
    """

    session: ProtocolSession
    templates: Dict[str, ServerTemplate]

    def __init__(self, session, templates=None):
        self.session = session
        self.templates = {}
        for template in templates or ():
            self.templates.setdefault(template.type, template)

    @classmethod
    def from_manifest(cls, session, path) -> 'ServerCatalog':
        """Creates a catalog seeded with the templates of a manifest file."""
        return cls(session, load_static_catalog(path))

    def list_all(self) -> List[Server]:
        return self._servers('GETS All')

    def list_capable(self, core: int, memory: int, disk: int) -> List[Server]:
        """Servers whose type can ever run the given demand."""
        return self._servers(f'GETS Capable {core} {memory} {disk}')

    def list_available(
        self, core: int, memory: int, disk: int
    ) -> List[Server]:
        """Servers that can run the given demand right now."""
        return self._servers(f'GETS Avail {core} {memory} {disk}')

    def list_by_type(self, server_type: str) -> List[Server]:
        return self._servers(f'GETS Type {server_type}')

    def list_jobs(self, server: Server) -> List[Job]:
        """Returns the jobs waiting and running on a server (``LSTJ``)."""
        return self._query(
            f'LSTJ {server.type} {server.id}', Job.from_listing
        )

    def estimated_wait_time(self, server: Server) -> int:
        """Asks the simulator for its own estimate of a server's wait time."""
        reply = self.session.request(f'EJWT {server.type} {server.id}')
        try:
            return int(reply)
        except ValueError as e:
            raise ProtocolError(f'Unexpected reply to EJWT: {reply!r}') from e

    @property
    def rates_known(self) -> bool:
        """Whether any cached template carries an hourly rate."""
        return any(t.hourly_rate >= 0 for t in self.templates.values())

    def template_for(self, server_type: str) -> Optional[ServerTemplate]:
        """Returns the cached template for a type, if any was seen."""
        return self.templates.get(server_type)

    def observe(self, server: Server) -> Server:
        """Records the template of an unseen type and enriches ``server``.

        The first record seen for a type wins.
        """
        if server.type not in self.templates and not server.skeletal:
            self.templates[server.type] = ServerTemplate.from_server(server)
        return server.enrich(self.templates.get(server.type))

    def _servers(self, command: str) -> List[Server]:
        servers = self._query(command, Server.from_record)
        for server in servers:
            self.observe(server)
        logger.debug('%s returned %d servers', command, len(servers))
        return servers

    def _query(self, command: str, parse: Callable[[str], T]) -> List[T]:
        header = self.session.request(command)
        fields = header.split()
        if len(fields) < 2 or fields[0] != 'DATA':
            raise ProtocolError(
                f'Expected DATA in reply to {command!r}, got {header!r}'
            )
        try:
            count = int(fields[1])
        except ValueError as e:
            raise ProtocolError(f'Unparsable record count {header!r}') from e
        if count < 0:
            raise ProtocolError(f'Negative record count {header!r}')

        self.session.send_line(ACK)
        records = [parse(self.session.receive_line()) for _ in range(count)]
        if count:
            self.session.send_line(ACK)
        terminator = self.session.receive_line()
        if terminator != TERMINATOR:
            raise ProtocolError(
                f'Expected {TERMINATOR!r} after {count} records in reply to '
                f'{command!r}, got {terminator!r}'
            )
        return records
