#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""cli - Command line entry point of the client."""

import logging
import os
import pathlib
import sys
from datetime import datetime

import click
from dotenv import load_dotenv

from .catalog import ServerCatalog
from .config import Settings, ClientOptions
from .engine import SchedulingEngine, build_scheduler, POLICIES
from .errors import ManifestError, ProtocolError
from .loop import SessionLoop, RunSummary
from .predictor import PredictionMode
from .scheduler import FitnessMode
from .session import ProtocolSession

logger = logging.getLogger('dsclient')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(log_file: str, verbose: bool, argv) -> None:
    """Logs to ``log_file`` (with a session header) and to stderr."""
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_file, mode='w')
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console)

    logger.info(
        'Start session time: %s', datetime.now().strftime('%B %d %Y at %Hh %Mm')
    )
    logger.info('Arguments: %s', ' '.join(argv) if argv else 'No args')


def build_catalog(session, manifest: str, gets_all: bool) -> ServerCatalog:
    """Seeds a catalog from the manifest, or from ``GETS All``.

    ``GETS All`` is used when asked for, or when the manifest can't be read.
    """
    if not gets_all:
        try:
            return ServerCatalog.from_manifest(session, manifest)
        except ManifestError as e:
            logger.warning('%s, falling back to GETS All', e)
    catalog = ServerCatalog(session)
    servers = catalog.list_all()
    logger.info('GETS All listed %d servers', len(servers))
    return catalog


def run_client(host: str, port: int, user: str, manifest: str,
               options: ClientOptions, session=None) -> RunSummary:
    """Connects, schedules every job of the session and disconnects."""
    session = session or ProtocolSession()
    session.connect((host, port), user)
    try:
        catalog = build_catalog(session, manifest, options.gets_all)
    except Exception:
        session.disconnect()
        raise
    if options.policy == 'cheapest' and not catalog.rates_known:
        logger.warning(
            'No hourly rates known, the cheapest policy ranks every server '
            'type alike'
        )
    engine = SchedulingEngine(catalog, build_scheduler(catalog, options))
    return SessionLoop(session, engine, options.terminate_idle).run()


@click.command()
@click.option('--host', default=None, help='ds-server host')
@click.option('--port', type=int, default=None, help='ds-server port')
@click.option('-u', '--user', default=None, help='identity sent with AUTH')
@click.option(
    '--policy',
    type=click.Choice(list(POLICIES)),
    default='best-fit',
    show_default=True,
    help='server selection policy',
)
@click.option(
    '--estimate/--exact',
    default=False,
    help='predict availability with EJWT instead of simulating job queues',
)
@click.option(
    '--terminate-idle',
    is_flag=True,
    help='terminate servers left idle after a job completes',
)
@click.option(
    '--booting-available/--no-booting-available',
    default=True,
    show_default=True,
    help='score booting servers as if they were available',
)
@click.option(
    '--core-only/--balanced',
    default=False,
    help='best fit on cores alone, or on cores, memory and disk',
)
@click.option(
    '-g', '--gets-all',
    is_flag=True,
    help='list servers with GETS All instead of reading the manifest',
)
@click.option('--manifest', default=None, help='path to ds-system.xml')
@click.option('--log-file', default=None, help='session log file')
@click.option('-v', '--verbose', is_flag=True, help='log wire traffic')
def cli(host, port, user, policy, estimate, terminate_idle,
        booting_available, core_only, gets_all, manifest, log_file, verbose):
    """
    Scheduling client for the ds-sim distributed systems simulator.
    """
    configure_logging(log_file or Settings.log_file, verbose, sys.argv[1:])
    options = ClientOptions(
        policy=policy,
        prediction=PredictionMode.ESTIMATE if estimate
        else PredictionMode.EXACT,
        fitness=FitnessMode.CORE_ONLY if core_only
        else FitnessMode.BALANCED,
        booting_available=booting_available,
        terminate_idle=terminate_idle,
        gets_all=gets_all,
    )
    try:
        summary = run_client(
            host or Settings.host,
            port or Settings.port,
            user or Settings.user,
            manifest or Settings.manifest,
            options,
        )
    except (ConnectionError, ProtocolError) as e:
        logger.error('%s', e)
        sys.exit(1)
    click.echo(
        f'Dispatched {summary.dispatched} jobs '
        f'({summary.unsatisfiable} unsatisfiable, '
        f'{summary.terminated} servers terminated)'
    )


def main():
    load_dotenv(pathlib.Path(os.getcwd()).joinpath('.env'), override=True)
    Settings.read_environments()
    cli()


if __name__ == '__main__':
    main()
