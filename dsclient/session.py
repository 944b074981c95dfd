#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""session - The single stateful connection to the simulator.

The protocol is line oriented and strictly synchronous: every line we write
is answered by exactly one line before we write again (query replies are
the exception, see :mod:`dsclient.catalog`). Reads block for as long as the
simulator takes; there is no timeout.
"""

import logging
import socket
from typing import Optional, Tuple

from .errors import ProtocolError

logger = logging.getLogger(__name__)

ENCODING = 'utf-8'
TERMINATOR = b'\n'
ACK = 'OK'


class LineTransport:
    """Buffered newline framing on top of a connected socket.

    Parameters
    ----------
        sock : socket.socket
            A connected stream socket. The transport owns it from now on.
    """

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.stream = sock.makefile('rwb')

    @classmethod
    def open(cls, address: Tuple[str, int]) -> 'LineTransport':
        """Connects to ``address`` and wraps the new socket."""
        return cls(socket.create_connection(address))

    def write_line(self, text: str) -> None:
        self.stream.write(text.encode(ENCODING) + TERMINATOR)
        self.stream.flush()

    def read_line(self) -> str:
        """Reads one full line, without its terminator.

        Raises:
            ProtocolError: if the peer closed the connection before a full
            line arrived, or the line is not valid UTF-8.
        """
        data = self.stream.readline()
        if not data:
            raise ProtocolError('Connection closed by the simulator')
        if not data.endswith(TERMINATOR):
            raise ProtocolError(f'Unterminated line {data!r}')
        try:
            return data.rstrip(b'\r\n').decode(ENCODING)
        except UnicodeDecodeError as e:
            raise ProtocolError(f'Undecodable line {data!r}') from e

    def close(self) -> None:
        try:
            self.stream.close()
        finally:
            self.sock.close()


class ProtocolSession:
    """One authenticated session with the simulator.

    A transport can be injected, in which case :func:`connect` skips opening
    a socket and only performs the handshake over it. Anything with
    ``write_line``, ``read_line`` and ``close`` methods will do.

    Parameters
    ----------
        transport : Optional[LineTransport]
            Already connected transport to use
    """

    transport: Optional[LineTransport]

    def __init__(self, transport=None):
        self.transport = transport
        self.connected = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.disconnect()

    def connect(self, address: Tuple[str, int], identity: str) -> None:
        """Opens the connection and performs the ``HELO``/``AUTH`` handshake.

        Raises:
            ConnectionError: if the socket cannot be opened or the simulator
            rejects either step of the handshake.
        """
        if self.transport is None:
            try:
                self.transport = LineTransport.open(address)
            except OSError as e:
                raise ConnectionError(
                    f'Unable to connect to {address[0]}:{address[1]}'
                ) from e
        self.connected = True
        try:
            for command in ('HELO', f'AUTH {identity}'):
                reply = self.request(command)
                if reply != ACK:
                    raise ConnectionError(
                        f'Handshake rejected: {command!r} answered by '
                        f'{reply!r}'
                    )
        except ConnectionError:
            self._close()
            raise
        except (OSError, ProtocolError) as e:
            self._close()
            raise ConnectionError('Handshake failed') from e
        logger.info('Connected as %s', identity)

    def send_line(self, text: str) -> None:
        if not self.connected:
            raise ProtocolError('Session is not connected')
        logger.debug('SENT %s', text)
        self.transport.write_line(text)

    def receive_line(self) -> str:
        if not self.connected:
            raise ProtocolError('Session is not connected')
        line = self.transport.read_line()
        logger.debug('RCVD %s', line)
        return line

    def request(self, text: str) -> str:
        """Sends a line and returns the single line that answers it."""
        self.send_line(text)
        return self.receive_line()

    def expect(self, text: str, reply: str = ACK) -> None:
        """Sends a line and checks the simulator answered with ``reply``."""
        answer = self.request(text)
        if answer != reply:
            raise ProtocolError(
                f'Expected {reply!r} in reply to {text!r}, got {answer!r}'
            )

    def disconnect(self) -> None:
        """Sends ``QUIT``, waits for its acknowledgement and closes.

        Safe to call any number of times. Failures during teardown are
        logged, since there is nothing left to protect at that point.
        """
        if not self.connected:
            return
        try:
            reply = self.request('QUIT')
            if reply != 'QUIT':
                logger.warning('Unexpected reply to QUIT: %r', reply)
        except (OSError, ProtocolError) as e:
            logger.warning('Failed to quit cleanly: %s', e)
        finally:
            self._close()
        logger.info('Disconnected')

    def _close(self) -> None:
        self.connected = False
        if self.transport is not None:
            try:
                self.transport.close()
            except OSError as e:
                logger.warning('Failed to close transport: %s', e)
