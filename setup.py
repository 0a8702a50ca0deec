#!/usr/bin/env python
"""
DSMLib: Voxel and unknown-parameter bookkeeping for DSM waveform inversion
"""

import os
from setuptools import setup, find_packages


here = os.path.abspath(os.path.dirname(__file__))
about = {}
with open(os.path.join(here, 'dsmlib', "__version__.py")) as f:
	exec(f.read(), about)


pkg_metadata = dict(
		name="dsmlib",
		version=about["__version__"],
		description="Voxel design and unknown parameters for waveform inversion",
		packages=find_packages(exclude=["tests", "tests.*"]),
		python_requires=">=3.7",
		keywords="Seismic Imaging, Waveform Inversion, Direct Solution Method, Voxels",
		install_requires=['obspy>=1.1.0',
						  'numpy>=1.16.0',
						  'scipy>=1.3.0'],
		extras_require={"test": ["pytest"]},
		classifiers=["Programming Language :: Python :: 3"]
		)

setup(**pkg_metadata)
