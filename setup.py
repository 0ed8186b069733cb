#!/usr/bin/env python
# -*- encoding: utf-8 -*-

import pathlib

from setuptools import find_packages
from setuptools import setup

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text()


setup(
    name='rcv_sankey',
    version='0.1.0',
    description='Instant-runoff tabulation with Sankey vote transfer graphs',
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages('src'),
    package_dir={'': 'src'},
    package_data={'rcv_sankey': ['*.json']},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Utilities',
    ],
    keywords=[
        'rcv', 'irv', 'instant-runoff', 'ranked-choice', 'sankey',
    ],
    python_requires='>=3.8',
    install_requires=[
        'tqdm>=4.56.0',
        'pandas>=1.2.0,<3',
    ],
    extras_require={
        'test': ['pytest>=6.2.4'],
    },
    entry_points={
        'console_scripts': [
            'rcv-sankey = rcv_sankey.cli:main',
        ]
    },
)
