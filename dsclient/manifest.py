#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""manifest - Loader for the static system manifest (``ds-system.xml``).

The simulator writes the manifest after authentication. Each ``server``
element describes one type::

    <server type="small" limit="2" bootupTime="60" hourlyRate="0.4"
            coreCount="2" memory="4000" disk="16000" />

Reading it lets the catalog know every type's static capacity and rate
without a ``GETS All`` round trip.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union

from .errors import ManifestError
from .server import ServerTemplate

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = 'ds-system.xml'


def _attribute(element: ET.Element, *names: str) -> str:
    for name in names:
        value = element.get(name)
        if value is not None:
            return value
    raise ManifestError(
        f'Server element {element.attrib} lacks attribute {names[0]!r}'
    )


def parse_manifest(content: str) -> List[ServerTemplate]:
    """Parses the text of a manifest into server templates.

    Templates are returned in document order, which is the order the
    simulator uses for its own listings.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ManifestError(f'Unable to parse manifest: {e}') from e

    templates = []
    for element in root.iter('server'):
        try:
            templates.append(ServerTemplate(
                _attribute(element, 'type'),
                int(_attribute(element, 'limit')),
                int(_attribute(element, 'bootupTime')),
                float(_attribute(element, 'hourlyRate')),
                int(_attribute(element, 'coreCount', 'cores')),
                int(_attribute(element, 'memory')),
                int(_attribute(element, 'disk')),
            ))
        except ValueError as e:
            raise ManifestError(
                f'Invalid value in server element {element.attrib}'
            ) from e
    if not templates:
        raise ManifestError('Manifest describes no servers')
    return templates


def load_static_catalog(
    path: Union[str, Path] = DEFAULT_MANIFEST
) -> List[ServerTemplate]:
    """Loads the server templates described in a manifest file."""
    try:
        content = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise ManifestError(f'Unable to read manifest {path}: {e}') from e
    templates = parse_manifest(content)
    logger.info('Loaded %d server types from %s', len(templates), path)
    return templates

