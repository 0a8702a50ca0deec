"""
Test the data set description (data entries, event catalog) and the ray 
path segments used to design voxels
"""
import os
import pytest
from obspy.core.event import Catalog, Event, Origin, ResourceIdentifier

from dsmlib.exceptions import MissingEventException, SkippedItemWarning
from dsmlib.voxel import (DataEntry, EventCatalog, FullPosition, 
                          HorizontalPosition, Observer, PierceTool, 
                          RaypathSegment, read_data_entry_file)
from dsmlib.voxel.raypath import _runs


def test_read_data_entry_file(tmpdir):
    """
    Data entries are read in file order, each one once
    """
    path = os.path.join(tmpdir, "dataEntry.lst")
    with open(path, "w") as f:
        f.write("# event station network lat lon component\n"
                "201001010000A ABC XY 35.5 -120.25 T\n"
                "201001010000A ABC XY 35.5 -120.25 Z\n"
                "201001010000A ABC XY 35.5 -120.25 T\n")
    entries = read_data_entry_file(path)
    assert(len(entries) == 2)
    assert(entries[0].event_id == "201001010000A")
    assert(entries[0].observer == Observer("ABC", "XY", (35.5, -120.25)))
    assert([e.component for e in entries] == ["T", "Z"])

    with pytest.raises(ValueError):
        DataEntry("201001010000A", entries[0].observer, "X")


def test_event_catalog(tmpdir):
    """
    Hypocenters are found by event ID; missing events raise a dedicated 
    KeyError
    """
    path = os.path.join(tmpdir, "events.txt")
    with open(path, "w") as f:
        f.write("201001010000A -10 120 25.5\n201001020000B 5 -60 600\n")
    catalog = EventCatalog.read(path)
    assert(len(catalog) == 2)
    assert(catalog["201001010000A"] == FullPosition(-10, 120, 6345.5))
    assert("201001020000B" in catalog)
    assert(catalog.get("missing") is None)
    with pytest.raises(MissingEventException):
        catalog["missing"]


def test_event_catalog_from_obspy():
    """
    Hypocenters come from the preferred origin, or from the first one, 
    with depths converted from m to km
    """
    first = Origin(latitude=-10, longitude=120, depth=25500)
    preferred = Origin(latitude=-11, longitude=121, depth=30000)
    events = [Event(resource_id=ResourceIdentifier("smi:local/201001010000A"),
                    origins=[first, preferred], 
                    preferred_origin_id=preferred.resource_id),
              Event(resource_id=ResourceIdentifier("smi:local/201001020000B"),
                    origins=[Origin(latitude=5, longitude=-60, 
                                    depth=600000)])]
    catalog = EventCatalog.from_obspy(Catalog(events=events))
    assert(sorted(catalog) == ["201001010000A", "201001020000B"])
    assert(catalog["201001010000A"] == FullPosition(-11, 121, 6341))
    assert(catalog["201001020000B"] == FullPosition(5, -60, 5771))

    catalog = EventCatalog.from_obspy(Catalog(events=events[1:]), 
                                      key=lambda event: "B")
    assert(list(catalog) == ["B"])


def test_segment_sampling():
    """
    Sample points are equally spaced and include both ends, even for 
    segments of zero length
    """
    segment = RaypathSegment(FullPosition(0, 0, 3500), 
                             FullPosition(0, 10, 3600))
    assert(segment.epicentral_distance == pytest.approx(10))
    points = segment.sample(2.5)
    assert(len(points) == 5)
    assert(points[0] == HorizontalPosition(0, 0))
    assert(points[2] == HorizontalPosition(0, 5))
    assert(points[-1] == HorizontalPosition(0, 10))

    point = FullPosition(12, 33, 3500)
    points = RaypathSegment(point, point).sample(2.5)
    assert(len(points) == 2)
    assert(points[0] == points[1] == HorizontalPosition(12, 33))


def test_runs():
    """
    Only runs of at least two consecutive points make a segment
    """
    mask = [False, True, True, False, True, False, True, True, True]
    assert(_runs(mask) == [(1, 2), (6, 8)])
    assert(_runs([True, True]) == [(0, 1)])
    assert(_runs([]) == [])


def test_missing_events_are_skipped():
    """
    Entries whose event is unknown are skipped, with a warning
    """
    observer = Observer("ABC", "XY", (35.5, -120.25))
    entries = [DataEntry("201001010000A", observer, "T")]
    pierce_tool = PierceTool(verbose=False)
    with pytest.warns(SkippedItemWarning):
        segments = pierce_tool.compute(entries, EventCatalog({}))
    assert(segments == [])
    assert(pierce_tool._exceptions["missing event"] == 1)


def test_pierce_tool():
    """
    ScS ray paths at intermediate distance run through the lowermost 
    mantle; the segment ends lie between the pierce radii
    """
    pierce_tool = PierceTool("prem", ["ScS"], (3480, 3880), verbose=False)
    hypocenter = FullPosition.from_depth(0, 0, 100)
    observer = Observer("ABC", "XY", (0, 60))
    segments = pierce_tool.inside_segments(hypocenter, observer)
    assert(len(segments) >= 1)
    for start, end in segments:
        for position in (start, end):
            assert(3480 - 1e-3 <= position.radius <= 3880 + 1e-3)
            assert(0 < position.longitude < 60)
            assert(position.latitude == pytest.approx(0, abs=1e-3))
