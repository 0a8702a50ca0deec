#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Voxel Layout Design
===================

The horizontal distribution of voxels is a list of 
:class:`dsmlib.voxel.HorizontalPixel`, arranged in rows of constant 
latitude. Along latitude, rows are spaced by :math:`\Delta\phi`, which can 
be given in degrees or in km (in which case it is converted to degrees at 
the center radius of the target region). Along longitude, the pixels of a
row are spaced either by a constant angle :math:`\Delta\lambda`, or by a
constant distance :math:`\Delta x` (in km) measured at the center radius 
:math:`r_c`, so that

.. math::

    \Delta\lambda(\phi) = \frac{\Delta x}{r_c \cos\phi}

and the physical size of the voxels does not shrink towards the poles.

Three designers are available:

- :class:`VoxelAutoDesigner` covers the regions sampled by the ray paths of a
  data set. Points are sampled along the ray path segments that run through
  the target layer (every :math:`\Delta\phi/2` degrees), binned into 
  colatitude bands of width :math:`\Delta\phi`, and each band is covered by 
  one row of pixels spanning the longitudes of its points.
- :class:`VoxelManualDesigner` covers a given latitude-longitude box.
- :class:`VoxelFileMaker` also covers a given box, but (when spacing by km) 
  centers each row on the middle of the longitude range.

In all cases, the radial discretization is defined by the border radii of 
the layers or, alternatively, by a range of radii and a thickness.
"""
from math import radians, degrees, cos, ceil, floor
import numpy as np
from dsmlib.utils import generate_output_path, normalize_longitude
from dsmlib.utils import numbered, log
from dsmlib.voxel.geometry import HorizontalPosition, HorizontalPixel
from dsmlib.voxel.geometry import LONGITUDE_DECIMALS
from dsmlib.voxel.layer import LayerInformationFile
from dsmlib.voxel.layer import layers_from_border_radii, layers_from_range
from dsmlib.voxel.voxel_file import VoxelInformationFile
from dsmlib.voxel.raypath import EventCatalog, PierceTool
from dsmlib.voxel.raypath import read_data_entry_file

__all__ = ['VoxelLayoutDesigner',
           'VoxelAutoDesigner',
           'VoxelManualDesigner',
           'VoxelFileMaker']

EPSILON = 1e-9



def round_half_up(x):
    return int(floor(x + 0.5))


def lower_index(lower_value, interval, offset):
    """ Smallest n such that n*interval + offset >= lower_value
    """
    return int(ceil((lower_value - offset) / interval - EPSILON))


def upper_index(upper_value, interval, offset):
    """ Largest n such that n*interval + offset <= upper_value
    """
    return int(floor((upper_value - offset) / interval + EPSILON))


def slots_per_turn(interval):
    """ Largest number of longitudes, `interval` apart, that stay distinct
    once wrapped around the globe and rounded
    """
    return int(ceil((360 - 10**-LONGITUDE_DECIMALS) / interval))


def check_range(name, lower, upper, minimum=None, maximum=None, 
                allow_equal=True):
    if (minimum is not None and lower < minimum) \
            or (maximum is not None and upper > maximum) \
            or upper < lower or (upper == lower and not allow_equal):
        bounds = '[%s, %s]'%(minimum, maximum)
        msg = '%s range [%s, %s] is invalid (bounds: %s)'%(name, lower, upper,
                                                           bounds)
        raise ValueError(msg)


def check_positive(name, value):
    if value <= 0:
        raise ValueError('%s must be positive.'%name)



class VoxelLayoutDesigner:
    """
    Base class of the voxel designers: radial discretization, latitude and 
    longitude spacings, and output of the voxel information file
    
    Parameters
    ----------
    dlatitude_deg, dlongitude_deg : float
        Latitude and longitude spacing (in degrees). Default is 5
        
    dlatitude_km, dlongitude_km : float, optional
        If given, the latitude (longitude) spacing is set in km at the center
        radius of the target region, and `dlatitude_deg` (`dlongitude_deg`) 
        is ignored
        
    latitude_offset : float
        Offset (in degrees, non-negative) of the latitude of the voxel 
        centers. Default is 0
        
    longitude_offset : float
        Offset (in degrees) of the longitude of the voxel centers. Default 
        is 0
        
    border_radii : array-like, optional
        Radii (in km) of the borders of the layers. At least two values are
        needed. If `None`, the layers are defined by `lower_radius`, 
        `upper_radius` and `dradius`
        
    lower_radius, upper_radius, dradius : float
        Range of radii and thickness (in km) of uniform layers. Defaults are
        3480, 3880 and 50
        
    verbose : bool
        If `True`, information on the design is displayed (in the standard
        error). Default is `True`
    """
    
    def __init__(self, dlatitude_deg=5, dlongitude_deg=5, dlatitude_km=None,
                 dlongitude_km=None, latitude_offset=0, longitude_offset=0, 
                 border_radii=None, lower_radius=3480, upper_radius=3880, 
                 dradius=50, verbose=True):
        if dlatitude_km is not None:
            check_positive('dlatitude_km', dlatitude_km)
        else:
            check_positive('dlatitude_deg', dlatitude_deg)
        if dlongitude_km is not None:
            check_positive('dlongitude_km', dlongitude_km)
        else:
            check_positive('dlongitude_deg', dlongitude_deg)
        if latitude_offset < 0:
            raise ValueError('latitude_offset must be non-negative.')
        self.dlatitude_deg = dlatitude_deg
        self.dlongitude_deg = dlongitude_deg
        self.dlatitude_km = dlatitude_km
        self.dlongitude_km = dlongitude_km
        self.latitude_offset = latitude_offset
        self.longitude_offset = longitude_offset
        
        if border_radii is not None:
            border_radii = np.sort(np.array(border_radii, dtype=np.float64))
            self.thicknesses, self.radii = layers_from_border_radii(border_radii)
            self.center_radius = float(border_radii[border_radii.size // 2])
        else:
            check_range('Radius', lower_radius, upper_radius, minimum=0, 
                        allow_equal=False)
            check_positive('dradius', dradius)
            self.thicknesses, self.radii = layers_from_range(lower_radius, 
                                                             upper_radius, 
                                                             dradius)
            self.center_radius = (lower_radius + upper_radius) / 2
        self.border_radii = border_radii
        self.verbose = verbose


    def __str__(self):
        string = '-------------------------------------\n'
        string += 'VOXEL LAYOUT PARAMETERS\n'
        if self.dlatitude_km is not None:
            string += 'dLatitude : %.3f km (%.3f°)\n'%(self.dlatitude_km,
                                                     self.dlatitude)
        else:
            string += 'dLatitude : %.3f°\n'%self.dlatitude
        if self.dlongitude_km is not None:
            string += 'dLongitude : %.3f km\n'%self.dlongitude_km
        else:
            string += 'dLongitude : %.3f°\n'%self.dlongitude_deg
        string += 'Offsets (lat, lon) : %.3f°, %.3f°\n'%(self.latitude_offset,
                                                        self.longitude_offset)
        string += 'Number of layers : %d\n'%self.radii.size
        string += 'Center radius : %.3f km\n'%self.center_radius
        string += '-------------------------------------'
        return string
    
    
    def __repr__(self):
        return str(self)


    @property
    def dlatitude(self):
        """ Latitude spacing in degrees
        """
        if self.dlatitude_km is not None:
            return degrees(self.dlatitude_km / self.center_radius)
        return self.dlatitude_deg


    @property
    def set_longitude_by_km(self):
        return self.dlongitude_km is not None


    def longitude_spacing(self, latitude):
        """ Longitude spacing (in degrees) of the row of pixels at `latitude`
        
        Parameters
        ----------
        latitude : float
            In degrees
            
        Returns
        -------
        float
        """
        if self.set_longitude_by_km:
            small_circle_radius = self.center_radius * cos(radians(latitude))
            return degrees(self.dlongitude_km / small_circle_radius)
        return self.dlongitude_deg


    def layers(self):
        """ Radial discretization
        
        Returns
        -------
        :class:`dsmlib.voxel.LayerInformationFile`
        """
        return LayerInformationFile(self.thicknesses, self.radii, 
                                    verbose=self.verbose)


    def design_horizontal_pixels(self, *args, **kwargs):
        raise NotImplementedError


    def voxel_file(self, pixels):
        """ Voxel information combining the layers with the given pixels
        
        Returns
        -------
        :class:`dsmlib.voxel.VoxelInformationFile`
        """
        return VoxelInformationFile(self.thicknesses, self.radii, pixels, 
                                    verbose=self.verbose)


    def write(self, pixels, savedir='.', tag=None, append_date=True):
        """ Writes the voxel information file to a new file in `savedir`
        
        Parameters
        ----------
        pixels : list of :class:`dsmlib.voxel.HorizontalPixel`
        
        savedir : str
            Directory where the file is saved. Default is the current 
            directory
            
        tag : str, optional
            Tag included in the file name
            
        append_date : bool
            If `True` (default), the current date and time are appended to 
            the file name
            
        Returns
        -------
        path : str
            Path of the file, named voxel[_tag][_date].inf
            
        Raises
        ------
        FileExistsError
            If the file already exists
        """
        path = generate_output_path(savedir, 'voxel', tag=tag, 
                                    append_date=append_date)
        self.voxel_file(pixels).write(path)
        return path


    @staticmethod
    def _pixel(latitude, longitude, dlatitude, dlongitude):
        position = HorizontalPosition(latitude, normalize_longitude(longitude))
        return HorizontalPixel(position, dlatitude, dlongitude)



class VoxelAutoDesigner(VoxelLayoutDesigner):
    """
    Designs the voxels covering the regions sampled by the ray paths of a 
    data set, in the radius range where the ray paths are considered
    
    Parameters
    ----------
    pierce_phases : iterable of str
        Seismic phases whose ray paths are considered. Default is ('ScS',)
        
    lower_pierce_radius, upper_pierce_radius : float
        Radii (in km) bounding the portions of the ray paths to cover. 
        Defaults are 3480 and 3880
        
    structure_name : str
        1-D velocity model used for ray tracing. Default is 'prem'
        
    cross_date_line : bool
        If `True`, longitudes are handled in [0, 360) rather than in 
        [-180, 180), so that regions crossing the date line are not 
        spread over the whole globe. Default is `False`
        
    **kwargs
        Additional keyword arguments passed to :class:`VoxelLayoutDesigner`
        
        
    Examples
    --------
    >>> from dsmlib.voxel import VoxelAutoDesigner
    >>> designer = VoxelAutoDesigner(pierce_phases=['ScS'], 
    ...                              dlatitude_km=200,
    ...                              dlongitude_km=200,
    ...                              border_radii=[3480, 3580, 3680])
    >>> path = designer.run('/path/to/dataEntry.lst', '/path/to/events.txt')
    
    The pixels can also be designed from ray path segments obtained 
    otherwise
    
    >>> pixels = designer.design_horizontal_pixels(segments)
    """
    
    def __init__(self, pierce_phases=('ScS',), lower_pierce_radius=3480, 
                 upper_pierce_radius=3880, structure_name='prem', 
                 cross_date_line=False, **kwargs):
        super().__init__(**kwargs)
        check_range('Pierce radius', lower_pierce_radius, upper_pierce_radius,
                    minimum=0, allow_equal=False)
        self.pierce_phases = list(pierce_phases)
        self.lower_pierce_radius = lower_pierce_radius
        self.upper_pierce_radius = upper_pierce_radius
        self.structure_name = structure_name
        self.cross_date_line = cross_date_line


    @property
    def n_colatitude_bands(self):
        """ Number of colatitude bands the sample points are binned into 
        (including those beyond the pole when a latitude offset is used)
        """
        return round_half_up((180 + self.latitude_offset) / self.dlatitude) + 1


    def colatitude_band_index(self, latitude):
        """ Index of the colatitude band containing `latitude`
        
        Colatitude is used so that the index is never negative, the latitude
        offset moving the bands towards larger colatitudes.
        
        Parameters
        ----------
        latitude : float
            In degrees
            
        Returns
        -------
        int
        """
        return round_half_up((90 - latitude + self.latitude_offset) 
                             / self.dlatitude)


    def band_latitude(self, index):
        """ Center latitude of the voxels in the i-th colatitude band
        """
        return 90 - index * self.dlatitude + self.latitude_offset


    def compute_segments(self, entries, catalog):
        """ Ray path segments between the pierce radii
        
        Parameters
        ----------
        entries : iterable of :class:`dsmlib.voxel.DataEntry`
        
        catalog : :class:`dsmlib.voxel.EventCatalog` or mapping
        
        Returns
        -------
        list of :class:`dsmlib.voxel.RaypathSegment`
        """
        pierce_tool = PierceTool(self.structure_name, 
                                 self.pierce_phases,
                                 (self.lower_pierce_radius, 
                                  self.upper_pierce_radius),
                                 verbose=self.verbose)
        return pierce_tool.compute(entries, catalog)


    def longitude_ranges(self, segments):
        """ Minimum and maximum longitude of the points sampled in each 
        colatitude band
        
        Parameters
        ----------
        segments : iterable of :class:`dsmlib.voxel.RaypathSegment`
        
        Returns
        -------
        minlon, maxlon : ndarray of shape (n_colatitude_bands,)
            Bands without sample points have minlon = +inf, maxlon = -inf
        """
        nbands = self.n_colatitude_bands
        minlon = np.full(nbands, np.inf)
        maxlon = np.full(nbands, -np.inf)
        for segment in segments:
            for point in segment.sample(self.dlatitude / 2):
                if self.cross_date_line:
                    lon = point.longitude_across_date_line()
                else:
                    lon = point.longitude
                i = self.colatitude_band_index(point.latitude)
                minlon[i] = min(minlon[i], lon)
                maxlon[i] = max(maxlon[i], lon)
        return minlon, maxlon


    def design_horizontal_pixels(self, segments):
        """ Pixels covering the ray path segments
        
        Parameters
        ----------
        segments : iterable of :class:`dsmlib.voxel.RaypathSegment`
        
        Returns
        -------
        list of :class:`dsmlib.voxel.HorizontalPixel`
            Rows of pixels, from North to South
        """
        dlat = self.dlatitude
        minlon, maxlon = self.longitude_ranges(segments)
        sampled = minlon <= maxlon
        if not np.any(sampled):
            log('No sample points found: no voxels designed', self.verbose)
            return []
        if self.set_longitude_by_km:
            base_longitude = (np.min(minlon[sampled]) + np.max(maxlon[sampled])) / 2 \
                             + self.longitude_offset
        else:
            base_longitude = self.longitude_offset
        
        pixels = []
        for i in np.flatnonzero(sampled):
            latitude = self.band_latitude(i)
            if latitude <= -90 or latitude >= 90:
                continue
            dlon = self.longitude_spacing(latitude)
            row_min = round_half_up((minlon[i] - base_longitude) / dlon) * dlon \
                      + base_longitude
            row_max = round_half_up((maxlon[i] - base_longitude) / dlon) * dlon \
                      + base_longitude
            nlon = min(round_half_up((row_max - row_min) / dlon) + 1,
                       slots_per_turn(dlon))
            for j in range(nlon):
                pixels.append(self._pixel(latitude, row_min + j*dlon, dlat, dlon))
        log('%s designed'%numbered(len(pixels), 'horizontal pixel', 
                                   'horizontal pixels'), self.verbose)
        return pixels


    def run(self, entries, catalog, savedir='.', tag=None, append_date=True):
        """ Designs the voxels for a data set and writes them to a new voxel
        information file
        
        Parameters
        ----------
        entries : str or iterable of :class:`dsmlib.voxel.DataEntry`
            Data entries, or path to a data entry file
            
        catalog : str or :class:`dsmlib.voxel.EventCatalog`
            Hypocenters, or path to a file readable by 
            :meth:`dsmlib.voxel.EventCatalog.read`
            
        savedir, tag, append_date
            See :meth:`VoxelLayoutDesigner.write`
            
        Returns
        -------
        path : str
        """
        if isinstance(entries, str):
            entries = read_data_entry_file(entries, verbose=self.verbose)
        if isinstance(catalog, str):
            catalog = EventCatalog.read(catalog)
        segments = self.compute_segments(entries, catalog)
        pixels = self.design_horizontal_pixels(segments)
        return self.write(pixels, savedir, tag=tag, append_date=append_date)



class VoxelManualDesigner(VoxelLayoutDesigner):
    r"""
    Designs the voxels whose centers lie in a latitude-longitude box
    
    Row latitudes are set at :math:`i \Delta\phi + \phi_0`, where 
    :math:`\phi_0` is the latitude offset. Longitudes are set at
    :math:`j \Delta\lambda + \lambda_0`, where :math:`\lambda_0` is the 
    longitude offset when spacing by degrees, and the middle of the longitude
    range plus the longitude offset when spacing by km.
    
    Parameters
    ----------
    lower_latitude, upper_latitude : float
        Latitude range (in degrees) of the voxel centers, within [-90, 90].
        Defaults are 0 and 0
        
    lower_longitude, upper_longitude : float
        Longitude range (in degrees) of the voxel centers, within 
        [-180, 360]. Defaults are 0 and 180
        
    **kwargs
        Additional keyword arguments passed to :class:`VoxelLayoutDesigner`
        
        
    Examples
    --------
    >>> designer = VoxelManualDesigner(lower_latitude=-10, 
    ...                                upper_latitude=10,
    ...                                lower_longitude=120,
    ...                                upper_longitude=150,
    ...                                border_radii=[3480, 3580, 3680])
    >>> pixels = designer.design_horizontal_pixels()
    >>> path = designer.run(savedir='/path/to/dir')
    """
    
    def __init__(self, lower_latitude=0, upper_latitude=0, lower_longitude=0, 
                 upper_longitude=180, **kwargs):
        super().__init__(**kwargs)
        check_range('Latitude', lower_latitude, upper_latitude, -90, 90)
        check_range('Longitude', lower_longitude, upper_longitude, -180, 360)
        self.lower_latitude = lower_latitude
        self.upper_latitude = upper_latitude
        self.lower_longitude = lower_longitude
        self.upper_longitude = upper_longitude


    @property
    def row_latitudes(self):
        """ Latitudes of the rows of voxels, from South to North
        """
        dlat = self.dlatitude
        first = lower_index(self.lower_latitude, dlat, self.latitude_offset)
        last = upper_index(self.upper_latitude, dlat, self.latitude_offset)
        return [i*dlat + self.latitude_offset for i in range(first, last + 1)]


    def row_longitudes(self, latitude):
        """ Longitudes of the voxel centers in the row at `latitude`
        """
        dlon = self.longitude_spacing(latitude)
        if self.set_longitude_by_km:
            base = (self.lower_longitude + self.upper_longitude) / 2 \
                   + self.longitude_offset
        else:
            base = self.longitude_offset
        first = lower_index(self.lower_longitude, dlon, base)
        last = upper_index(self.upper_longitude, dlon, base)
        last = min(last, first + slots_per_turn(dlon) - 1)
        return [base + j*dlon for j in range(first, last + 1)]


    def design_horizontal_pixels(self):
        """ Pixels covering the latitude-longitude box
        
        Returns
        -------
        list of :class:`dsmlib.voxel.HorizontalPixel`
            Rows of pixels, from South to North
        """
        dlat = self.dlatitude
        pixels = []
        for latitude in self.row_latitudes:
            dlon = self.longitude_spacing(latitude)
            for longitude in self.row_longitudes(latitude):
                pixels.append(self._pixel(latitude, longitude, dlat, dlon))
        log('%s designed'%numbered(len(pixels), 'horizontal pixel', 
                                   'horizontal pixels'), self.verbose)
        return pixels


    def run(self, savedir='.', tag=None, append_date=True):
        """ Designs the voxels and writes them to a new voxel information file
        
        Returns
        -------
        path : str
        """
        pixels = self.design_horizontal_pixels()
        return self.write(pixels, savedir, tag=tag, append_date=append_date)



class VoxelFileMaker(VoxelManualDesigner):
    r"""
    Designs the voxels whose centers lie in a latitude-longitude box. 
    
    Differently from :class:`VoxelManualDesigner`, when spacing by km each 
    row consists of :math:`\lceil (\lambda_{max} - \lambda_{min}) / 
    \Delta\lambda \rceil` pixels placed symmetrically about the middle of 
    the longitude range (the longitude offset is not used). When spacing by 
    degrees, longitudes are set at :math:`j \Delta\lambda + \lambda_0`, and 
    the offset :math:`\lambda_0` must be non-negative.
    
    Parameters
    ----------
    See :class:`VoxelManualDesigner`
    """
    
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.set_longitude_by_km and self.longitude_offset < 0:
            raise ValueError('longitude_offset must be non-negative.')


    def row_longitudes(self, latitude):
        if not self.set_longitude_by_km:
            return super().row_longitudes(latitude)
        dlon = self.longitude_spacing(latitude)
        nlon = int(ceil((self.upper_longitude - self.lower_longitude) / dlon 
                        - EPSILON))
        nlon = min(nlon, slots_per_turn(dlon))
        center = (self.lower_longitude + self.upper_longitude) / 2
        start = center - (nlon - 1) / 2 * dlon
        return [start + j*dlon for j in range(nlon)]
