#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Voxel Information File
======================

A voxel information file combines a radial discretization (see 
:class:`dsmlib.voxel.LayerInformationFile`) with a list of horizontal pixels.
Each voxel is one pixel at one layer radius, so that the file describes 
:math:`n_{radii} \times n_{pixels}` voxels.

The file format is::

    # thicknesses of each layer [km]
    50.0 50.0
    # radii of center points of each layer [km]
    3505.0 3555.0
    # horizontal rectangle on sphere [deg] (latitude longitude dLatitude dLongitude)
    10.0000 20.0000 5.0 5.0
    10.0000 25.0000 5.0 5.0

Lines starting with `#`, as well as blank lines, are ignored when reading.
The order of the pixels is preserved, and it determines (together with the
radii) the order of the unknown parameters derived from the file.
"""
import numpy as np
from dsmlib.utils import read_information_lines, write_lines, numbered, log
from dsmlib.voxel.geometry import HorizontalPosition, HorizontalPixel
from dsmlib.voxel.layer import check_layers, format_values, parse_values

__all__ = ['VoxelInformationFile']

PIXEL_COMMENT = '# horizontal rectangle on sphere [deg] ' \
                '(latitude longitude dLatitude dLongitude)'



class VoxelInformationFile:
    """
    Voxel grid defined by layers and horizontal pixels
    
    Parameters
    ----------
    thicknesses : array-like of shape (n,)
        Thickness of each layer (in km)
        
    radii : array-like of shape (n,)
        Radius of the center of each layer (in km), strictly increasing
        
    pixels : iterable of :class:`dsmlib.voxel.HorizontalPixel`
        Horizontal tiles. Tuples (lat, lon, dlat, dlon) are also accepted
        
    verbose : bool
        If `True`, the number of voxels read or written is displayed (in the 
        standard error). Default is `False`
        
        
    Attributes
    ----------
    thicknesses, radii : ndarray of shape (n,)
    
    pixels : list of :class:`dsmlib.voxel.HorizontalPixel`
    
    
    Examples
    --------
    >>> from dsmlib.voxel import VoxelInformationFile, HorizontalPixel
    >>> voxels = VoxelInformationFile([50, 50], 
    ...                               [3505, 3555], 
    ...                               [HorizontalPixel((0, 0), 5, 5),
    ...                                HorizontalPixel((0, 5), 5, 5)])
    >>> voxels.n_voxels
    4
    >>> voxels.write('/path/to/voxel.inf')
    >>> VoxelInformationFile.read('/path/to/voxel.inf') == voxels
    True
    """
    
    def __init__(self, thicknesses, radii, pixels, verbose=False):
        self._thicknesses, self._radii = check_layers(thicknesses, radii)
        self._pixels = [self._as_pixel(pixel) for pixel in pixels]
        self.verbose = verbose


    def __repr__(self):
        return 'VoxelInformationFile(%s, %s)'%(
            numbered(self._radii.size, 'radius', 'radii'),
            numbered(len(self._pixels), 'pixel', 'pixels'))


    def __eq__(self, other):
        if not isinstance(other, VoxelInformationFile):
            return NotImplemented
        return np.array_equal(self._thicknesses, other._thicknesses) \
            and np.array_equal(self._radii, other._radii) \
            and self._pixels == other._pixels

    __hash__ = None


    @staticmethod
    def _as_pixel(pixel):
        if isinstance(pixel, HorizontalPixel):
            return pixel
        lat, lon, dlat, dlon = pixel
        return HorizontalPixel(HorizontalPosition(lat, lon), dlat, dlon)


    @classmethod
    def read(cls, path, verbose=False):
        """ Reads a voxel information file
        
        Parameters
        ----------
        path : str
        
        verbose : bool
        
        Returns
        -------
        :class:`VoxelInformationFile`
        
        Raises
        ------
        ValueError
            If the numbers of thicknesses and radii differ, if the radii are 
            not strictly increasing, or if a pixel line does not consist of
            four values
        """
        lines = read_information_lines(path)
        if len(lines) < 2:
            raise ValueError('%s should contain thicknesses and radii'%path)
        thicknesses = parse_values(lines[0])
        radii = parse_values(lines[1])
        pixels = []
        for line in lines[2:]:
            values = line.split()
            if len(values) != 4:
                raise ValueError('Invalid pixel in %s: %s'%(path, line))
            pixels.append(cls._as_pixel([float(v) for v in values]))
        voxels = cls(thicknesses, radii, pixels, verbose=verbose)
        log('%s found in %s'%(numbered(voxels.n_voxels, 'voxel', 'voxels'), 
                              path), verbose)
        return voxels


    @property
    def thicknesses(self):
        return self._thicknesses.copy()


    @property
    def radii(self):
        return self._radii.copy()


    @property
    def pixels(self):
        return list(self._pixels)


    @property
    def n_voxels(self):
        return self._radii.size * len(self._pixels)


    @property
    def horizontal_positions(self):
        """ Centers of the horizontal pixels, in file order
        """
        return [pixel.position for pixel in self._pixels]


    def layers(self):
        """ Radial discretization of the voxel grid
        
        Returns
        -------
        :class:`dsmlib.voxel.LayerInformationFile`
        """
        from dsmlib.voxel.layer import LayerInformationFile
        return LayerInformationFile(self._thicknesses, self._radii, 
                                    verbose=self.verbose)


    def write(self, path, overwrite=False):
        """ Writes the voxel information file
        
        Parameters
        ----------
        path : str
        
        overwrite : bool
            If `False` (default), an existing file is never replaced
        """
        log('Outputting %s in %s'%(numbered(self.n_voxels, 'voxel', 'voxels'), 
                                   path), self.verbose)
        lines = ['# thicknesses of each layer [km]',
                 format_values(self._thicknesses),
                 '# radii of center points of each layer [km]',
                 format_values(self._radii),
                 PIXEL_COMMENT]
        lines.extend(str(pixel) for pixel in self._pixels)
        write_lines(path, lines, overwrite=overwrite)


    def full_position_set(self):
        """ Centers of all the voxels
        
        Returns
        -------
        set of :class:`dsmlib.voxel.FullPosition`
            Unordered
        """
        return {pixel.position.to_full_position(radius) 
                for pixel in self._pixels for radius in self._radii}


    def to_unknown_parameters(self, variable_types, strict=False):
        """ 
        One :class:`dsmlib.parameter.Physical3DParameter` per variable type 
        and voxel, weighted by the voxel volume (in km^3)
        
        Parameters
        ----------
        variable_types : iterable of :class:`dsmlib.parameter.VariableType` or str
        
        strict : bool
            If `True`, repeated pixels raise 
            :class:`dsmlib.exceptions.DuplicateParameterException`. Otherwise
            (default), each pair of duplicates is reported with a 
            :class:`dsmlib.exceptions.DuplicateParameterWarning`
        
        Returns
        -------
        list
            For each variable type, for each pixel (in file order), the
            parameters at increasing radius
        """
        from dsmlib.parameter import Physical3DParameter, VariableType
        from dsmlib.parameter import check_duplicates
        parameters = []
        for variable_type in variable_types:
            variable_type = VariableType.of(variable_type)
            for pixel in self._pixels:
                for radius, thickness in zip(self._radii, self._thicknesses):
                    position = pixel.position.to_full_position(radius)
                    volume = pixel.volume(radius, thickness)
                    parameters.append(Physical3DParameter(variable_type, 
                                                          position, 
                                                          volume))
        check_duplicates(parameters, strict=strict)
        return parameters
