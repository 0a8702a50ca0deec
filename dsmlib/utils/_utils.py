#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions shared by the voxel and parameter subpackages.
"""

import os
import sys
import time
import tempfile
import numpy as np
from obspy.geodetics import locations2degrees, kilometers2degrees

__all__ = ['EARTH_RADIUS',
           'epicentral_distance',
           'azimuth',
           'point_along_azimuth',
           'km_to_degrees',
           'sector_volume',
           'normalize_longitude',
           'read_information_lines',
           'write_lines',
           'write_bytes',
           'generate_output_path',
           'numbered',
           'log']

EARTH_RADIUS = 6371.0


def epicentral_distance(lat1, lon1, lat2, lon2):
    """ 
    Calculates the epicentral distance (in degrees) between coordinate 
    points (in degrees) on a sphere. This function calls directly the obspy 
    `locations2degrees`, which is already vectorized.
    
    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float or array-like of shape (n,)
        Coordinates of the points on the Earth's surface, in degrees.        
    
    Returns
    -------
    Epicentral distance (in degrees) 
        If the input is an array (or list) of coordinates, an array of 
        distances is returned
    """
    return locations2degrees(lat1, lon1, lat2, lon2)


def azimuth(lat1, lon1, lat2, lon2):
    """ 
    Calculates the azimuth (in degrees, [0, 360)) of the second point as
    seen from the first one, on a sphere.
    
    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float or array-like of shape (n,)
        Coordinates of the points on the Earth's surface, in degrees.               
    
    Returns
    -------
    float or ndarray of shape (n,)
    """
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dlambda = np.radians(np.asarray(lon2) - np.asarray(lon1))
    y = np.sin(dlambda) * np.cos(phi2)
    x = np.cos(phi1)*np.sin(phi2) - np.sin(phi1)*np.cos(phi2)*np.cos(dlambda)
    return _as_float(np.degrees(np.arctan2(y, x)) % 360)


def point_along_azimuth(lat, lon, azimuth, distance):
    """ 
    Position reached by travelling, along a great circle, a given angular
    distance from (lat, lon) in the direction of `azimuth`.
    
    Parameters
    ----------
    lat, lon : float or array-like of shape (n,)
        Starting point, in degrees
        
    azimuth : float or array-like of shape (n,)
        Direction of travel (in degrees, clockwise from North)
        
    distance : float or array-like of shape (n,)
        Epicentral distance to travel, in degrees
        
    Returns
    -------
    lat, lon : float or ndarray of shape (n,)
        Latitude in [-90, 90] and longitude in [-180, 180), in degrees
    """
    phi1 = np.radians(lat)
    theta = np.radians(azimuth)
    delta = np.radians(distance)
    sin_phi2 = np.sin(phi1)*np.cos(delta) + np.cos(phi1)*np.sin(delta)*np.cos(theta)
    phi2 = np.arcsin(np.clip(sin_phi2, -1, 1))
    dlambda = np.arctan2(np.sin(theta) * np.sin(delta) * np.cos(phi1),
                         np.cos(delta) - np.sin(phi1)*sin_phi2)
    lat2 = _as_float(np.degrees(phi2))
    lon2 = normalize_longitude(np.asarray(lon) + np.degrees(dlambda))
    return lat2, lon2


def normalize_longitude(lon):
    """ Maps longitudes (in degrees) onto [-180, 180)
    
    Parameters
    ----------
    lon : float or ndarray
    
    Returns
    -------
    float or ndarray
    """
    return _as_float((np.asarray(lon, dtype=float) + 180) % 360 - 180)


def _as_float(x):
    x = np.asarray(x)
    return x if x.ndim else float(x)


def km_to_degrees(km, radius):
    """ 
    Converts a distance in km, measured along a circle of given radius, to 
    the corresponding angle in degrees. It calls obspy `kilometers2degrees`.
    
    Parameters
    ----------
    km : float
        Distance along the circle
        
    radius : float
        Radius of the circle (in km)
        
    Returns
    -------
    float
    """
    return kilometers2degrees(km, radius=radius)


def sector_volume(radius, dradius, latitude, dlatitude, dlongitude):
    r""" Volume (in km^3) of a spherical sector
    
    The sector is bounded by :math:`r \pm dr/2`, 
    :math:`\phi \pm d\phi/2` and an arbitrary longitudinal span 
    :math:`d\lambda`, and its volume is
    
    .. math::
        
        V = \frac{r_2^3 - r_1^3}{3} (\sin\phi_2 - \sin\phi_1) d\lambda
        
    Latitudinal limits beyond the poles are clipped to :math:`\pm 90^{\circ}`.
    
    Parameters
    ----------
    radius, dradius : float
        Central radius and radial extent of the sector (in km)
        
    latitude, dlatitude : float
        Central latitude and latitudinal extent (in degrees)
        
    dlongitude : float
        Longitudinal extent (in degrees)
        
    Returns
    -------
    float
    
    Raises
    ------
    ValueError
        If the radial extent is not positive, or the sector would reach 
        below the center of the Earth
    """
    r1 = radius - dradius/2
    r2 = radius + dradius/2
    if dradius <= 0 or r1 < 0:
        raise ValueError('Invalid radial extent %s at radius %s'%(dradius, radius))
    lat1 = max(latitude - dlatitude/2, -90)
    lat2 = min(latitude + dlatitude/2, 90)
    shell = (r2**3 - r1**3) / 3
    band = np.sin(np.radians(lat2)) - np.sin(np.radians(lat1))
    return float(shell * band * np.radians(dlongitude))


def read_information_lines(path):
    """ 
    Reads an information file, skipping blank lines and lines whose first
    non-blank character is `#`
    
    Parameters
    ----------
    path : str
        Absolute path to the file
        
    Returns
    -------
    list of str
        Stripped lines, in file order
    """
    with open(path, 'r') as f:
        lines = [line.strip() for line in f]
    return [line for line in lines if line and not line.startswith('#')]


def _replace_atomically(path, mode, writer, overwrite):
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(path)
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(dir=directory, prefix='.tmp_')
    try:
        with os.fdopen(fd, mode) as f:
            writer(f)
        os.replace(tmp, path)
    except BaseException:
        os.remove(tmp)
        raise


def write_lines(path, lines, overwrite=False):
    """ 
    Writes text lines to `path` through a temporary file, which is renamed
    only once all lines have been written
    
    Parameters
    ----------
    path : str
        Absolute path to the resulting file
        
    lines : iterable of str
        Lines to write (without newline character)
        
    overwrite : bool
        If `False` (default), an existing file is never replaced
        
    Raises
    ------
    FileExistsError
        If `path` exists and `overwrite` is `False`
    """
    def writer(f):
        for line in lines:
            f.write(line + '\n')
    _replace_atomically(path, 'w', writer, overwrite)


def write_bytes(path, chunks, overwrite=False):
    """ Binary counterpart of :func:`write_lines`
    
    Parameters
    ----------
    path : str
    
    chunks : iterable of bytes
    
    overwrite : bool
    """
    def writer(f):
        for chunk in chunks:
            f.write(chunk)
    _replace_atomically(path, 'wb', writer, overwrite)


def generate_output_path(savedir, name, tag=None, append_date=True, 
                         extension='.inf'):
    """ 
    Builds the path of a new output file, in the format 
    name[_tag][_date]extension
    
    Parameters
    ----------
    savedir : str
        Directory where the file will be saved
        
    name : str
        Root of the file name
        
    tag : str, optional
        Tag to include in the file name
        
    append_date : bool
        If `True` (default), the current date and time is appended
        
    extension : str
    
    Returns
    -------
    path : str
    
    Raises
    ------
    FileExistsError
        If a file with the same name already exists
    """
    parts = [name]
    if tag:
        parts.append(tag)
    if append_date:
        parts.append(time.strftime('%Y%m%d%H%M%S'))
    path = os.path.join(savedir, '_'.join(parts) + extension)
    if os.path.exists(path):
        raise FileExistsError(path)
    return path


def numbered(n, singular, plural):
    """ '1 voxel', '3 voxels'
    
    Parameters
    ----------
    n : int
    
    singular, plural : str
    
    Returns
    -------
    str
    """
    return '%d %s'%(n, singular if n == 1 else plural)


def log(message, verbose=True):
    """ Prints `message` to the standard error, if `verbose`
    
    Parameters
    ----------
    message : str
    
    verbose : bool
    """
    if verbose:
        print(message, file=sys.stderr)
