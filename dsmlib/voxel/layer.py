#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Radial Discretization
=====================

The radial discretization of the model domain consists of a set of 
layers, each described by its thickness and by the radius of its center. 
Layers are stored from the one closest to the center of the Earth upwards, 
and their radii must be strictly increasing.

On disk, a layer information file looks like::

    # thicknesses of each layer [km]
    50.0 50.0
    # radii of center points of each layer [km]
    3505.0 3555.0

"""
import numpy as np
from dsmlib.utils import read_information_lines, write_lines, numbered, log

__all__ = ['LayerInformationFile']



def check_layers(thicknesses, radii):
    """ 
    Validates a radial discretization and returns it as a pair of float 
    arrays
    
    Parameters
    ----------
    thicknesses, radii : array-like of shape (n,)
    
    Returns
    -------
    thicknesses, radii : ndarray of shape (n,)
    
    Raises
    ------
    ValueError
        If the two arrays have different lengths, if the radii are not
        strictly increasing, or if any thickness is not positive
    """
    thicknesses = np.array(thicknesses, dtype=np.float64).ravel()
    radii = np.array(radii, dtype=np.float64).ravel()
    if thicknesses.size != radii.size:
        msg = 'The number of thicknesses (%d) and radii (%d) does not match.'
        raise ValueError(msg%(thicknesses.size, radii.size))
    if np.any(np.diff(radii) <= 0):
        raise ValueError('Radii must be sorted, without duplicates: %s'%radii)
    if np.any(thicknesses <= 0):
        raise ValueError('Thicknesses must be positive: %s'%thicknesses)
    return thicknesses, radii


def layers_from_border_radii(border_radii):
    """ 
    Thicknesses and center radii of the layers bounded by `border_radii`.
    The border radii are sorted before use.
    
    Parameters
    ----------
    border_radii : array-like of shape (n+1,)
        Radii of the layer borders (in km)
        
    Returns
    -------
    thicknesses, radii : ndarray of shape (n,)
    
    Raises
    ------
    ValueError
        If less than two border radii are given, or if two of them coincide
    """
    border_radii = np.sort(np.array(border_radii, dtype=np.float64).ravel())
    if border_radii.size < 2:
        raise ValueError('There must be at least 2 values for border radii.')
    if np.any(border_radii < 0):
        raise ValueError('Border radii must be non-negative.')
    thicknesses = np.diff(border_radii)
    if np.any(thicknesses == 0):
        raise ValueError('Duplicate border radii: %s'%border_radii)
    radii = (border_radii[:-1] + border_radii[1:]) / 2
    return thicknesses, radii


def layers_from_range(lower_radius, upper_radius, dradius):
    """ 
    Uniform layers of thickness `dradius`, the first one starting at 
    `lower_radius`. Only complete layers fitting below `upper_radius` are 
    created.
    
    Parameters
    ----------
    lower_radius, upper_radius : float
        Radial range (in km), 0 <= lower_radius < upper_radius
        
    dradius : float
        Thickness of each layer (in km)
        
    Returns
    -------
    thicknesses, radii : ndarray of shape (n,)
    """
    if dradius <= 0:
        raise ValueError('dradius must be positive.')
    if not 0 <= lower_radius < upper_radius:
        msg = 'Radius range [%s, %s] is invalid.'%(lower_radius, upper_radius)
        raise ValueError(msg)
    nradii = int(np.floor((upper_radius-lower_radius) / dradius))
    thicknesses = np.full(nradii, float(dradius))
    radii = lower_radius + (np.arange(nradii)+0.5) * dradius
    return thicknesses, radii


def format_values(values):
    return ' '.join(repr(float(v)) for v in values)


def parse_values(line):
    return np.array([float(v) for v in line.split()], dtype=np.float64)



class LayerInformationFile:
    """
    Radial discretization of the model domain
    
    Parameters
    ----------
    thicknesses : array-like of shape (n,)
        Thickness of each layer (in km)
        
    radii : array-like of shape (n,)
        Radius of the center of each layer (in km). These must be strictly
        increasing
        
    verbose : bool
        If `True`, information on the files read or written is displayed
        (in the standard error). Default is `False`
        
        
    Examples
    --------
    >>> from dsmlib.voxel import LayerInformationFile
    >>> layers = LayerInformationFile.from_border_radii([3480, 3530, 3580])
    >>> layers.thicknesses
    array([50., 50.])
    >>> layers.radii
    array([3505., 3555.])
    >>> layers.write('/path/to/layer.inf')
    
    Equivalently, the same layers are obtained via
    
    >>> layers = LayerInformationFile.from_range(3480, 3580, 50)
    """
    
    def __init__(self, thicknesses, radii, verbose=False):
        self._thicknesses, self._radii = check_layers(thicknesses, radii)
        self.verbose = verbose


    def __repr__(self):
        return 'LayerInformationFile(thicknesses=%s, radii=%s)'%(
            list(self._thicknesses), list(self._radii))


    def __eq__(self, other):
        if not isinstance(other, LayerInformationFile):
            return NotImplemented
        return np.array_equal(self._thicknesses, other._thicknesses) \
            and np.array_equal(self._radii, other._radii)

    __hash__ = None


    def __len__(self):
        return self._radii.size


    @classmethod
    def from_border_radii(cls, border_radii, **kwargs):
        """ Layers bounded by `border_radii` (see :func:`layers_from_border_radii`)
        """
        return cls(*layers_from_border_radii(border_radii), **kwargs)


    @classmethod
    def from_range(cls, lower_radius, upper_radius, dradius, **kwargs):
        """ Uniform layers (see :func:`layers_from_range`)
        """
        return cls(*layers_from_range(lower_radius, upper_radius, dradius), 
                   **kwargs)


    @classmethod
    def read(cls, path, verbose=False):
        """ Reads a layer information file
        
        Parameters
        ----------
        path : str
        
        verbose : bool
        
        Returns
        -------
        :class:`LayerInformationFile`
        
        Raises
        ------
        ValueError
            If the file does not contain two lines of values, or if these do
            not define a valid set of layers
        """
        lines = read_information_lines(path)
        if len(lines) != 2:
            raise ValueError('%s should contain thicknesses and radii'%path)
        layers = cls(parse_values(lines[0]), parse_values(lines[1]), 
                     verbose=verbose)
        log('%s found in %s'%(numbered(len(layers), 'layer', 'layers'), path),
            verbose)
        return layers


    @property
    def thicknesses(self):
        return self._thicknesses.copy()


    @property
    def radii(self):
        return self._radii.copy()


    def write(self, path, overwrite=False):
        """ Writes the layer information file
        
        Parameters
        ----------
        path : str
        
        overwrite : bool
            If `False` (default), an existing file is never replaced
        """
        log('Outputting %s in %s'%(numbered(len(self), 'layer', 'layers'), 
                                   path), self.verbose)
        lines = ['# thicknesses of each layer [km]',
                 format_values(self._thicknesses),
                 '# radii of center points of each layer [km]',
                 format_values(self._radii)]
        write_lines(path, lines, overwrite=overwrite)


    def to_unknown_parameters(self, variable_types, strict=False):
        """ 
        One :class:`dsmlib.parameter.Physical1DParameter` per variable type and 
        layer, weighted by the layer thickness
        
        Parameters
        ----------
        variable_types : iterable of :class:`dsmlib.parameter.VariableType` or str
        
        strict : bool
            If `True`, a variable type given twice raises 
            :class:`dsmlib.exceptions.DuplicateParameterException` instead of
            issuing a :class:`dsmlib.exceptions.DuplicateParameterWarning`
        
        Returns
        -------
        list
            Parameters ordered by variable type first, then by radius
        """
        from dsmlib.parameter import Physical1DParameter, VariableType
        from dsmlib.parameter import check_duplicates
        parameters = []
        for variable_type in variable_types:
            variable_type = VariableType.of(variable_type)
            for radius, thickness in zip(self._radii, self._thicknesses):
                parameters.append(Physical1DParameter(variable_type, radius, 
                                                      thickness))
        check_duplicates(parameters, strict=strict)
        return parameters
