#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Perturbation Points
===================

Before voxel information files were introduced, unknowns were defined from
lists of points. A horizontal point file assigns a name to each horizontal
position::

    <name> <latitude> <longitude>
    
and a perturbation point file lists the radii at which each horizontal 
point is perturbed::

    <name> <radius>
    
The volume associated with each perturbation point is that of the 
spherical sector :math:`(r \pm \Delta r / 2, \phi \pm \Delta\phi / 2, 
\lambda \pm \Delta\lambda / 2)`. Volumes are computed in parallel, one task
per point.

Alternatively, :class:`UnknownParameterSetter` builds the unknowns from a
file of points (`latitude longitude radius`) and a file of layers 
(`radius thickness`).
"""
import os
import warnings
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
import numpy as np
from scipy.spatial import cKDTree
from dsmlib.exceptions import VolumeComputationException, SkippedItemWarning
from dsmlib.utils import read_information_lines, write_lines, sector_volume
from dsmlib.utils import numbered, log
from dsmlib.voxel.geometry import HorizontalPosition, FullPosition
from dsmlib.parameter.types import VariableType
from dsmlib.parameter.unknown import Physical3DParameter
from dsmlib.parameter.files import UnknownParameterFile

__all__ = ['HorizontalPoint',
           'PerturbationPoint',
           'create_perturbation_point_file',
           'UnknownParameterSetter']



class HorizontalPoint:
    """ Named horizontal positions, read from a horizontal point file
    
    Parameters
    ----------
    path : str
        Path to the horizontal point file
        
    Raises
    ------
    ValueError
        If a line is malformed, or if a name appears more than once
    """
    
    def __init__(self, path):
        self.path = path
        self._positions = OrderedDict()
        for line in read_information_lines(path):
            parts = line.split()
            if len(parts) != 3:
                raise ValueError('Invalid horizontal point in %s: %s'%(path, 
                                                                      line))
            name = parts[0]
            if name in self._positions:
                raise ValueError('Horizontal point %s is duplicated'%name)
            self._positions[name] = HorizontalPosition(float(parts[1]), 
                                                       float(parts[2]))


    def __len__(self):
        return len(self._positions)


    def __contains__(self, name):
        return name in self._positions


    @property
    def names(self):
        return list(self._positions)


    def position(self, name):
        """ Horizontal position of the point called `name`
        
        Raises
        ------
        KeyError
            If no point is called `name`
        """
        try:
            return self._positions[name]
        except KeyError:
            raise KeyError('No horizontal point called %s in %s'%(name, 
                                                                 self.path)) from None


def create_perturbation_point_file(radii, horizontal_point, path, 
                                   overwrite=False):
    """ 
    Writes a perturbation point file in which each horizontal point is 
    perturbed at each radius
    
    Parameters
    ----------
    radii : array-like of shape (n,)
        In km
        
    horizontal_point : :class:`HorizontalPoint`
    
    path : str
        Path of the perturbation point file
        
    overwrite : bool
        If `False` (default), an existing file is never replaced
    """
    lines = ['%s %r'%(name, float(r)) for name in horizontal_point.names 
             for r in radii]
    write_lines(path, lines, overwrite=overwrite)



class PerturbationPoint:
    """
    Perturbation points and their volumes
    
    Parameters
    ----------
    horizontal_point : :class:`HorizontalPoint` or str
        Horizontal points (or path to a horizontal point file)
        
    path : str
        Path to the perturbation point file
        
    dradius, dlatitude, dlongitude : float
        Extents of the volume associated with each point, in km and degrees
        
    verbose : bool
        If `True`, the progress of the volume computation is displayed (in 
        the standard error). Default is `True`
        
        
    Attributes
    ----------
    names : list of str
        Name of the horizontal point of each perturbation point
        
    positions : list of :class:`dsmlib.voxel.FullPosition`
        Perturbation points, in file order
        
        
    Examples
    --------
    >>> points = PerturbationPoint('/path/to/horizontalPoint.inf', 
    ...                            '/path/to/perturbationPoint.inf',
    ...                            dradius=50, 
    ...                            dlatitude=5,
    ...                            dlongitude=5)
    >>> volumes = points.compute_volumes()
    >>> points.create_unknown_parameter_file('/path/to/unknown.inf')
    """
    
    def __init__(self, horizontal_point, path, dradius, dlatitude, dlongitude,
                 verbose=True):
        if isinstance(horizontal_point, str):
            horizontal_point = HorizontalPoint(horizontal_point)
        self.horizontal_point = horizontal_point
        self.path = path
        self.dradius = dradius
        self.dlatitude = dlatitude
        self.dlongitude = dlongitude
        self.verbose = verbose
        self.names = []
        self.positions = []
        for line in read_information_lines(path):
            parts = line.split()
            if len(parts) != 2:
                raise ValueError('Invalid perturbation point in %s: %s'%(path,
                                                                        line))
            position = horizontal_point.position(parts[0])
            self.names.append(parts[0])
            self.positions.append(position.to_full_position(float(parts[1])))
        self._tree = None


    def __len__(self):
        return len(self.positions)


    @property
    def radii(self):
        return np.array([p.radius for p in self.positions])


    def volume(self, position):
        """ Volume (km^3) associated with a perturbation point
        """
        return sector_volume(position.radius, self.dradius, position.latitude,
                             self.dlatitude, self.dlongitude)


    def compute_volumes(self, max_workers=None, fail_fast=False):
        """ Volumes of all the perturbation points, computed in parallel
        
        Parameters
        ----------
        max_workers : int, optional
            Number of threads. By default, it is decided by 
            :class:`concurrent.futures.ThreadPoolExecutor`
            
        fail_fast : bool
            If `True`, the first failure is raised as soon as it occurs and
            the pending computations are cancelled. Otherwise (default), all
            the computations are carried out, and the failures are reported 
            together
            
        Returns
        -------
        volumes : dict
            Perturbation points as keys, volumes as values, in file order
            
        Raises
        ------
        VolumeComputationException
            If `fail_fast` is `False` and any of the volumes cannot be
            computed
        """
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self.volume, p) for p in self.positions]
            if fail_fast:
                wait(futures, return_when=FIRST_EXCEPTION)
                for future in futures:
                    future.cancel()
                for future in futures:
                    if future.done() and not future.cancelled() \
                            and future.exception() is not None:
                        raise future.exception()
        
        volumes = OrderedDict()
        errors = OrderedDict()
        for position, future in zip(self.positions, futures):
            error = future.exception()
            if error is not None:
                errors[position] = error
            else:
                volumes[position] = future.result()
        if errors:
            raise VolumeComputationException(errors)
        log('Volumes of %s computed'%numbered(len(volumes), 'point', 'points'),
            self.verbose)
        return volumes


    def create_unknown_parameter_file(self, path, variable_type='MU', 
                                      max_workers=None):
        """ Writes the unknown parameters (one per perturbation point) 
        
        Parameters
        ----------
        path : str
        
        variable_type : :class:`dsmlib.parameter.VariableType` or str
            Default is 'MU'
            
        Returns
        -------
        :class:`dsmlib.parameter.UnknownParameterFile`
        
        Raises
        ------
        FileExistsError
            If `path` already exists (checked before computing the volumes)
        """
        if os.path.exists(path):
            raise FileExistsError(path)
        variable_type = VariableType.of(variable_type)
        volumes = self.compute_volumes(max_workers=max_workers)
        unknowns = UnknownParameterFile(
                [Physical3DParameter(variable_type, p, volumes[p]) 
                 for p in self.positions], 
                verbose=self.verbose)
        unknowns.write(path)
        return unknowns


    def nearest_locations(self, location, k=None):
        """ Perturbation points sorted by their distance from `location`
        
        Parameters
        ----------
        location : :class:`dsmlib.voxel.FullPosition`
        
        k : int, optional
            Number of points to return. By default, all the points are 
            returned
            
        Returns
        -------
        list of :class:`dsmlib.voxel.FullPosition`
        """
        if self._tree is None:
            self._tree = cKDTree(np.array([p.to_xyz() for p in self.positions]))
        k = len(self) if k is None else min(k, len(self))
        _, indexes = self._tree.query(location.to_xyz(), k=k)
        return [self.positions[i] for i in np.atleast_1d(indexes)]



class UnknownParameterSetter:
    """
    Builds voxel unknowns from a file of points and a file of layers
    
    Parameters
    ----------
    point_path : str
        File with lines `latitude longitude radius`, one per voxel
        
    layer_path : str
        File with lines `radius thickness`, one per layer
        
    voxel_size : float
        Latitudinal and longitudinal extent of the voxels, in degrees
        
    verbose : bool
        Default is `True`
    """
    
    def __init__(self, point_path, layer_path, voxel_size, verbose=True):
        if voxel_size <= 0:
            raise ValueError('voxel_size must be positive.')
        self.voxel_size = voxel_size
        self.verbose = verbose
        self.points = []
        for line in read_information_lines(point_path):
            lat, lon, r = map(float, line.split()[:3])
            self.points.append(FullPosition(lat, lon, r))
        self.layers = {}
        for line in read_information_lines(layer_path):
            r, thickness = map(float, line.split()[:2])
            self.layers[FullPosition(0, 0, r).radius] = thickness


    def unknown_parameters(self, variable_types):
        """ 
        One :class:`dsmlib.parameter.Physical3DParameter` per variable type
        and point. Points whose radius does not correspond to any layer are 
        skipped, with a warning
        
        Parameters
        ----------
        variable_types : iterable of :class:`dsmlib.parameter.VariableType` or str
        
        Returns
        -------
        list
        """
        parameters = []
        skipped = set()
        for variable_type in variable_types:
            variable_type = VariableType.of(variable_type)
            for point in self.points:
                thickness = self.layers.get(point.radius)
                if thickness is None:
                    skipped.add(point.radius)
                    continue
                volume = sector_volume(point.radius, thickness, point.latitude,
                                       self.voxel_size, self.voxel_size)
                parameters.append(Physical3DParameter(variable_type, point, 
                                                      volume))
        for radius in sorted(skipped):
            warnings.warn('Ignoring radius %.4f: no layer found'%radius, 
                          SkippedItemWarning)
        log('%s set'%numbered(len(parameters), 'unknown parameter', 
                              'unknown parameters'), self.verbose)
        return parameters


    def write(self, variable_types, path, overwrite=False):
        """ Writes the unknown parameters to `path`
        
        Returns
        -------
        :class:`dsmlib.parameter.UnknownParameterFile`
        """
        unknowns = UnknownParameterFile(self.unknown_parameters(variable_types),
                                        verbose=self.verbose)
        unknowns.write(path, overwrite=overwrite)
        return unknowns
