#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
======
DSMLib
======
"""

from .__version__ import __version__
from .voxel import VoxelInformationFile, LayerInformationFile
from . import exceptions
from . import parameter
from . import utils
from . import voxel
