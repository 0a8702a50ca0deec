"""
===========================================
Utility Functions (:mod:`dsmlib.utils`)
===========================================

This module provides the helpers shared by the rest of DSMLib. These 
mainly build on `ObsPy <https://docs.obspy.org/>`_ and NumPy, and include:

- Vectorized calculation of epicentral distances and azimuths on a 
  spherical Earth, and of the position reached by travelling along a 
  great circle
  
- Conversion of distances in km to angular distances at an arbitrary 
  radius
  
- Volume of the spherical sector enclosing a voxel

- Reading of the information files used throughout the pipeline (lines 
  starting with `#` and blank lines are ignored), and writing of files 
  through a temporary path, so that partially written files are never left 
  on disk
  
"""
from ._utils import *
