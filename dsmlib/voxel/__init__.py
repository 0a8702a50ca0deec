r"""
=======================================
Voxel Design (:mod:`dsmlib.voxel`)
=======================================

This module discretizes a spherical shell of the Earth into voxels, i.e., 
horizontal pixels (tiles on the sphere, see 
:class:`dsmlib.voxel.geometry.HorizontalPixel`) extended radially over 
layers (see :class:`dsmlib.voxel.layer.LayerInformationFile`). A voxel grid
is stored as a :class:`dsmlib.voxel.voxel_file.VoxelInformationFile`, which 
is written once per experiment and read by every later stage of the 
inversion.

The horizontal pixels can be designed

- from the ray paths of a data set, so as to cover the regions they sample 
  in the target layer (:class:`dsmlib.voxel.designer.VoxelAutoDesigner`).
  Ray paths are computed via the TauP module of 
  `ObsPy <https://docs.obspy.org/>`_
  
- in a given latitude-longitude box 
  (:class:`dsmlib.voxel.designer.VoxelManualDesigner`,
  :class:`dsmlib.voxel.designer.VoxelFileMaker`)
  
with a spacing defined either in degrees or in km. In the latter case, the
longitude spacing of each row of pixels is adjusted to its latitude, so that
the physical size of the voxels is approximately constant.
"""
from .geometry import *
from .layer import *
from .voxel_file import *
from .raypath import *
from .designer import *
