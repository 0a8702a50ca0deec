#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Positions and Pixels
====================

Positions on (and inside) the Earth are immutable value objects. Two
positions are equal when their coordinates are equal after rounding
latitude and longitude to the 4th decimal digit (:math:`\sim 10` m at the 
surface) and radius to the 6th, so that positions read back from any 
information file compare equal to the ones that were written.

Longitudes are accepted in :math:`[-180^{\circ}, 360^{\circ})` and stored 
in :math:`[-180^{\circ}, 180^{\circ})`.

A :class:`HorizontalPixel` is a tile on the sphere: a center point and its
angular extents along latitude and longitude (not necessarily equal).
"""
from collections import namedtuple
import numpy as np
from dsmlib.utils import EARTH_RADIUS
from dsmlib.utils import epicentral_distance, azimuth, point_along_azimuth
from dsmlib.utils import sector_volume

__all__ = ['HorizontalPosition', 'FullPosition', 'HorizontalPixel', 'Observer']

LATITUDE_DECIMALS = 4
LONGITUDE_DECIMALS = 4
RADIUS_DECIMALS = 6



def _round_latitude(latitude):
    latitude = float(latitude)
    if not -90 <= latitude <= 90:
        raise ValueError('Latitude %s is invalid (must be in [-90, 90])'%latitude)
    return round(latitude, LATITUDE_DECIMALS) + 0.0


def _round_longitude(longitude):
    longitude = float(longitude)
    if not -180 <= longitude < 360:
        msg = 'Longitude %s is invalid (must be in [-180, 360))'%longitude
        raise ValueError(msg)
    longitude = round(longitude, LONGITUDE_DECIMALS)
    if longitude >= 180:
        longitude = round(longitude - 360, LONGITUDE_DECIMALS)
    return longitude + 0.0


class HorizontalPosition(namedtuple('HorizontalPosition', 
                                    ['latitude', 'longitude'])):
    """ Geographic position on the Earth's surface

    Parameters
    ----------
    latitude : float
        Latitude in degrees, [-90, 90]
        
    longitude : float
        Longitude in degrees, [-180, 360)
    """
    __slots__ = ()

    def __new__(cls, latitude, longitude):
        return super().__new__(cls, 
                               _round_latitude(latitude), 
                               _round_longitude(longitude))


    def __str__(self):
        return '%.4f %.4f'%(self.latitude, self.longitude)


    @property
    def colatitude(self):
        return 90 - self.latitude


    def longitude_across_date_line(self):
        """ Longitude in [0, 360)
        """
        return self.longitude + 360 if self.longitude < 0 else self.longitude


    def epicentral_distance(self, other):
        """ Epicentral distance (in degrees) to another position
        """
        return float(epicentral_distance(self.latitude, self.longitude, 
                                         other.latitude, other.longitude))


    def azimuth(self, other):
        """ Azimuth (in degrees, [0, 360)) of `other` seen from this position
        """
        return azimuth(self.latitude, self.longitude, 
                       other.latitude, other.longitude)


    def point_along_azimuth(self, azimuth, distance):
        """ 
        Position reached travelling `distance` degrees along the great circle 
        leaving this position with the given `azimuth` (in degrees)
        
        Returns
        -------
        :class:`HorizontalPosition`
        """
        lat, lon = point_along_azimuth(self.latitude, self.longitude, 
                                       azimuth, distance)
        return HorizontalPosition(lat, lon)


    def to_full_position(self, radius):
        return FullPosition(self.latitude, self.longitude, radius)



class FullPosition(namedtuple('FullPosition', 
                              ['latitude', 'longitude', 'radius'])):
    """ Position inside the Earth
    
    Parameters
    ----------
    latitude, longitude : float
        Geographic coordinates in degrees
        
    radius : float
        Distance from the center of the Earth, in km (not depth)
    """
    __slots__ = ()

    def __new__(cls, latitude, longitude, radius):
        radius = round(float(radius), RADIUS_DECIMALS) + 0.0
        if radius < 0:
            raise ValueError('Radius %s is invalid (must be positive)'%radius)
        return super().__new__(cls, 
                               _round_latitude(latitude), 
                               _round_longitude(longitude),
                               radius)


    @classmethod
    def from_depth(cls, latitude, longitude, depth):
        return cls(latitude, longitude, EARTH_RADIUS - depth)


    def __str__(self):
        return '%.4f %.4f %.6f'%self


    @property
    def depth(self):
        return EARTH_RADIUS - self.radius


    def to_horizontal_position(self):
        return HorizontalPosition(self.latitude, self.longitude)


    def to_full_position(self, radius):
        return FullPosition(self.latitude, self.longitude, radius)


    def epicentral_distance(self, other):
        return self.to_horizontal_position().epicentral_distance(other)


    def azimuth(self, other):
        return self.to_horizontal_position().azimuth(other)


    def point_along_azimuth(self, azimuth, distance):
        return self.to_horizontal_position().point_along_azimuth(azimuth, 
                                                                 distance)


    def to_xyz(self):
        """ Cartesian coordinates (in km), z pointing to the North pole
        
        Returns
        -------
        ndarray of shape (3,)
        """
        phi = np.radians(self.latitude)
        lam = np.radians(self.longitude)
        return self.radius * np.array([np.cos(phi) * np.cos(lam),
                                       np.cos(phi) * np.sin(lam),
                                       np.sin(phi)])



class HorizontalPixel(namedtuple('HorizontalPixel', 
                                 ['position', 'dlatitude', 'dlongitude'])):
    """ Horizontal tile on a sphere
    
    Parameters
    ----------
    position : :class:`HorizontalPosition`
        Center of the pixel
        
    dlatitude, dlongitude : float
        Latitudinal and longitudinal extent of the pixel, in degrees
    """
    __slots__ = ()

    def __new__(cls, position, dlatitude, dlongitude):
        if dlatitude <= 0 or dlongitude <= 0:
            msg = 'Pixel extents must be positive, got %s and %s'%(dlatitude, 
                                                                   dlongitude)
            raise ValueError(msg)
        if not isinstance(position, HorizontalPosition):
            position = HorizontalPosition(*position)
        return super().__new__(cls, position, float(dlatitude), 
                               float(dlongitude))


    def __str__(self):
        return '%s %r %r'%(self.position, self.dlatitude, self.dlongitude)


    @property
    def latitude(self):
        return self.position.latitude


    @property
    def longitude(self):
        return self.position.longitude


    def volume(self, radius, thickness):
        """ Volume (in km^3) of the voxel obtained extending the pixel 
        radially by `thickness` around `radius`
        """
        return sector_volume(radius, thickness, self.latitude, self.dlatitude, 
                             self.dlongitude)



class Observer(namedtuple('Observer', ['station', 'network', 'position'])):
    """ Seismic station, identified by its code, its network code and its
    position
    
    Parameters
    ----------
    station, network : str
        Station and network codes (no whitespace allowed)
        
    position : :class:`HorizontalPosition`
        Tuples (lat, lon) are also accepted
    """
    __slots__ = ()

    def __new__(cls, station, network, position):
        for code in (station, network):
            if not code or len(str(code).split()) != 1:
                raise ValueError('Invalid station or network code: %r'%code)
        if not isinstance(position, HorizontalPosition):
            position = HorizontalPosition(*position)
        return super().__new__(cls, str(station), str(network), position)


    def __str__(self):
        return '%s %s %s'%(self.station, self.network, self.position)


    @property
    def code(self):
        """ Station and network code, in the format STA_NET
        """
        return '%s_%s'%(self.station, self.network)
