r"""
======================================================
Unknown and Known Parameters (:mod:`dsmlib.parameter`)
======================================================

This module defines the unknowns of the linear inverse problem 
:math:`\mathbf{A} \mathbf{m} = \mathbf{d}` (see 
:class:`dsmlib.parameter.unknown.UnknownParameter`) and the files listing 
them. The order of the parameters in an 
:class:`dsmlib.parameter.files.UnknownParameterFile` defines the order of 
the columns of :math:`\mathbf{A}`, and is shared by every file derived from
it, such as the :class:`dsmlib.parameter.files.KnownParameterFile` storing 
the solution of the inversion.

Parameters can be derived from a voxel information file 
(:meth:`dsmlib.voxel.VoxelInformationFile.to_unknown_parameters`), from a 
layer information file, or from lists of points (see 
:mod:`dsmlib.parameter.legacy`).
"""
from .types import *
from .unknown import *
from .files import *
from .legacy import *
