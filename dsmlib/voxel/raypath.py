#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Ray Paths
=========

To design a voxel distribution adapted to a data set, the portions of the 
ray paths that run through the target region are needed. These are 
computed, for each pair of event and station, via the `TauP` module of
obspy [1]_: the pierce points of the requested phases at the two radii 
bounding the target region are added to the ray path, and every continuous 
portion of the ray path inside such radii is returned as a 
:class:`RaypathSegment`.

The data set is described by a data entry file, where each line identifies
one record::

    <eventID> <station> <network> <latitude> <longitude> <component>
    
whereas hypocenters are provided by an :class:`EventCatalog`.


References
----------
.. [1] Crotwell, H.P., Owens, T.J., & Ritsema, J. (1999). The TauP Toolkit: 
    flexible seismic travel-time and ray-path utilities. SRL, 70, 154-160.
"""
from collections import namedtuple, defaultdict
from collections.abc import Mapping
import warnings
import numpy as np
from obspy.taup import TauPyModel
from dsmlib.exceptions import MissingEventException, SkippedItemWarning
from dsmlib.utils import EARTH_RADIUS, read_information_lines, numbered, log
from dsmlib.voxel.geometry import FullPosition, HorizontalPosition, Observer

__all__ = ['COMPONENTS',
           'DataEntry',
           'read_data_entry_file',
           'EventCatalog',
           'RaypathSegment',
           'PierceTool']

COMPONENTS = ('Z', 'R', 'T')



class DataEntry(namedtuple('DataEntry', ['event_id', 'observer', 'component'])):
    """ Record of one event at one station, on one component
    
    Parameters
    ----------
    event_id : str
    
    observer : :class:`dsmlib.voxel.Observer`
    
    component : {'Z', 'R', 'T'}
    """
    __slots__ = ()

    def __new__(cls, event_id, observer, component):
        if component not in COMPONENTS:
            raise ValueError('Invalid component: %r'%component)
        return super().__new__(cls, str(event_id), observer, component)


    def __str__(self):
        return '%s %s %s'%(self.event_id, self.observer, self.component)


def read_data_entry_file(path, verbose=False):
    """ Reads a data entry file
    
    Parameters
    ----------
    path : str
    
    verbose : bool
    
    Returns
    -------
    list of :class:`DataEntry`
        Entries in file order, each appearing once
    """
    entries = {}
    for line in read_information_lines(path):
        parts = line.split()
        if len(parts) != 6:
            raise ValueError('Invalid data entry in %s: %s'%(path, line))
        event_id, station, network, lat, lon, component = parts
        observer = Observer(station, network, 
                            HorizontalPosition(float(lat), float(lon)))
        entries.setdefault(DataEntry(event_id, observer, component), None)
    log('%s found in %s'%(numbered(len(entries), 'data entry', 'data entries'),
                          path), verbose)
    return list(entries)



class EventCatalog(Mapping):
    """ Hypocenters of the events, indexed by event ID
    
    Parameters
    ----------
    hypocenters : mapping
        Event IDs as keys, :class:`dsmlib.voxel.FullPosition` (or tuples of
        latitude, longitude and radius) as values
        
        
    Examples
    --------
    >>> from obspy import read_events
    >>> catalog = EventCatalog.from_obspy(read_events('/path/to/quakeml.xml'))
    >>> catalog['201001010000A']
    FullPosition(latitude=-10.2, longitude=120.3, radius=6346.0)
    """
    
    def __init__(self, hypocenters):
        self._hypocenters = {}
        for event_id, position in dict(hypocenters).items():
            if not isinstance(position, FullPosition):
                position = FullPosition(*position)
            self._hypocenters[str(event_id)] = position


    def __getitem__(self, event_id):
        try:
            return self._hypocenters[event_id]
        except KeyError:
            raise MissingEventException(event_id) from None


    def __contains__(self, event_id):
        return event_id in self._hypocenters


    def __iter__(self):
        return iter(self._hypocenters)


    def __len__(self):
        return len(self._hypocenters)


    @classmethod
    def from_obspy(cls, catalog, key=None):
        """ Builds the catalog from an obspy Catalog
        
        Parameters
        ----------
        catalog : obspy.core.event.Catalog
        
        key : callable, optional
            Function returning the ID of an obspy Event. By default, the last
            part of the event resource identifier is used
            
        Returns
        -------
        :class:`EventCatalog`
            The preferred origin (or the first one) defines the hypocenter
        """
        if key is None:
            key = lambda event: str(event.resource_id).split('/')[-1]
        hypocenters = {}
        for event in catalog:
            origin = event.preferred_origin() or event.origins[0]
            hypocenters[key(event)] = FullPosition.from_depth(
                    origin.latitude, origin.longitude, origin.depth / 1000)
        return cls(hypocenters)


    @classmethod
    def read(cls, path):
        """ Reads a text file with lines `eventID latitude longitude depth`,
        the depth being in km
        """
        hypocenters = {}
        for line in read_information_lines(path):
            parts = line.split()
            if len(parts) != 4:
                raise ValueError('Invalid event in %s: %s'%(path, line))
            lat, lon, depth = map(float, parts[1:])
            hypocenters[parts[0]] = FullPosition.from_depth(lat, lon, depth)
        return cls(hypocenters)



class RaypathSegment(namedtuple('RaypathSegment', ['start', 'end'])):
    """ Portion of a ray path, between two :class:`dsmlib.voxel.FullPosition`
    """
    __slots__ = ()

    @property
    def epicentral_distance(self):
        return self.start.epicentral_distance(self.end)


    @property
    def azimuth(self):
        return self.start.azimuth(self.end)


    def sample(self, interval):
        """ 
        Equally spaced points along the great circle from start to end,
        including both ends
        
        Parameters
        ----------
        interval : float
            Maximum spacing between consecutive points, in degrees
            
        Returns
        -------
        list of :class:`dsmlib.voxel.HorizontalPosition`
            At least two points (coinciding if the segment has zero length)
        """
        distance = self.epicentral_distance
        nintervals = max(1, int(np.ceil(distance / interval)))
        step = distance / nintervals
        azimuth = self.azimuth
        start = self.start.to_horizontal_position()
        return [start.point_along_azimuth(azimuth, i * step) 
                for i in range(nintervals + 1)]



class PierceTool:
    """
    Computes the ray path segments running between two radii
    
    Parameters
    ----------
    structure_name : str
        Name of the 1-D velocity model used by TauP. Default is 'prem'
        
    phases : iterable of str
        Seismic phases. Default is ('ScS',)
        
    pierce_radii : (float, float)
        Radii (in km) bounding the target region. Default is (3480, 3880)
        
    verbose : bool
        If `True`, the number of segments and of skipped entries are 
        displayed (in the standard error)
        
        
    Attributes
    ----------
    model : obspy.taup.TauPyModel
    
    
    Examples
    --------
    >>> entries = read_data_entry_file('/path/to/dataEntry.lst')
    >>> catalog = EventCatalog.read('/path/to/events.txt')
    >>> pierce_tool = PierceTool('prem', ['ScS'], (3480, 3880))
    >>> segments = pierce_tool.compute(entries, catalog)
    """
    
    def __init__(self, structure_name='prem', phases=('ScS',), 
                 pierce_radii=(3480, 3880), verbose=True):
        self.structure_name = structure_name
        self.phases = list(phases)
        self.lower_radius, self.upper_radius = sorted(pierce_radii)
        if self.lower_radius < 0 or self.upper_radius > EARTH_RADIUS:
            raise ValueError('Invalid pierce radii: %s'%list(pierce_radii))
        self.verbose = verbose
        self.model = TauPyModel(model=structure_name)
        self._exceptions = defaultdict(int)


    def inside_segments(self, hypocenter, observer):
        """ Ray path segments between the pierce radii, for one source and 
        one station
        
        Parameters
        ----------
        hypocenter : :class:`dsmlib.voxel.FullPosition`
        
        observer : :class:`dsmlib.voxel.Observer`
        
        Returns
        -------
        list of :class:`RaypathSegment`
        """
        receiver = observer.position
        distance = hypocenter.epicentral_distance(receiver)
        azimuth = hypocenter.azimuth(receiver)
        top = EARTH_RADIUS - self.upper_radius
        bottom = EARTH_RADIUS - self.lower_radius
        arrivals = self.model.get_pierce_points(
                source_depth_in_km=max(hypocenter.depth, 0),
                distance_in_degree=distance,
                phase_list=self.phases,
                add_depth=[top, bottom])
        segments = []
        for arrival in arrivals:
            pierce = arrival.pierce
            depths = pierce['depth']
            distances = np.degrees(pierce['dist'])
            inside = (depths >= top - 1e-6) & (depths <= bottom + 1e-6)
            for start, end in _runs(inside):
                points = [hypocenter.point_along_azimuth(azimuth, distances[i])
                          .to_full_position(EARTH_RADIUS - depths[i]) 
                          for i in (start, end)]
                segments.append(RaypathSegment(*points))
        return segments


    def compute(self, entries, catalog):
        """ Ray path segments for all the data entries
        
        Entries whose event is not found in the catalog are skipped, with a 
        warning. The stations recording each event are considered once, 
        regardless of the number of components.
        
        Parameters
        ----------
        entries : iterable of :class:`DataEntry`
        
        catalog : :class:`EventCatalog` or mapping
        
        Returns
        -------
        list of :class:`RaypathSegment`
        """
        self._exceptions = defaultdict(int)
        pairs = {}
        for entry in entries:
            pairs.setdefault((entry.event_id, entry.observer), None)
        segments = []
        for event_id, observer in pairs:
            try:
                hypocenter = catalog[event_id]
            except KeyError:
                warnings.warn('Event %s not found: %s skipped'%(event_id, 
                                                              observer.code),
                              SkippedItemWarning)
                self._exceptions['missing event'] += 1
                continue
            found = self.inside_segments(hypocenter, observer)
            if not found:
                self._exceptions['no segment in range'] += 1
            segments.extend(found)
        log('%s computed'%numbered(len(segments), 'raypath segment', 
                                   'raypath segments'), self.verbose)
        if self._exceptions:
            log('Skipped: %s'%dict(self._exceptions), self.verbose)
        return segments


def _runs(mask):
    """ (first, last) indexes of each run of at least two consecutive True 
    """
    runs = []
    start = None
    for i, value in enumerate(mask):
        if value and start is None:
            start = i
        elif not value and start is not None:
            if i - 1 > start:
                runs.append((start, i - 1))
            start = None
    if start is not None and len(mask) - 1 > start:
        runs.append((start, len(mask) - 1))
    return runs
