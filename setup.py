#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""A setuptools based setup module.
See:
https://packaging.python.org/guides/distributing-packages-using-setuptools/
https://github.com/pypa/sampleproject
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
import pathlib

here = pathlib.Path(__file__).parent.resolve()

# Get the long description from the README file
long_description = (here / 'README.rst').read_text(encoding='utf-8')

extras = {
    'test': [
        'pytest',
        'coverage',
    ],
}

extras['all'] = [item for group in extras.values() for item in group]

setup(
    name='ds-client',
    version='0.1.0',
    description='Scheduling client for the ds-sim distributed systems '
                'simulator',
    long_description=long_description,
    long_description_content_type='text/x-rst',

    classifiers=[
        'Development Status :: 3 - Alpha',

        'Intended Audience :: Developers',
        'Intended Audience :: Education',

        'Topic :: System :: Distributed Computing',

        'License :: OSI Approved :: MIT License',

        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],

    keywords='ds-sim, scheduling, simulation, distributed systems',

    packages=find_packages(),
    python_requires='>=3.7, <4',

    install_requires=[
        'numpy',
        'click',
        'python-dotenv',
    ],

    extras_require=extras,

    entry_points={
        'console_scripts': [
            'ds-client=dsclient.cli:main',
        ],
    },
)
