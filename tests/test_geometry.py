"""
Test the geometric building blocks: positions, pixels, and the spherical
geometry utilities they rely on
"""
import numpy as np
import pytest

from dsmlib.utils import sector_volume, azimuth, point_along_azimuth
from dsmlib.utils import normalize_longitude
from dsmlib.voxel import HorizontalPosition, FullPosition, HorizontalPixel
from dsmlib.voxel import Observer


def test_horizontal_position_rounding_and_normalization():
    """
    Coordinates are rounded to the 4th decimal digit and longitudes are
    stored in [-180, 180)
    """
    position = HorizontalPosition(10.123456, 190)
    assert(position.latitude == 10.1235)
    assert(position.longitude == -170)
    assert(HorizontalPosition(0, 180).longitude == -180)
    assert(HorizontalPosition(0.00001, 0) == HorizontalPosition(0, 0))
    assert(str(HorizontalPosition(-5, 12.5)) == "-5.0000 12.5000")

    with pytest.raises(ValueError):
        HorizontalPosition(91, 0)
    with pytest.raises(ValueError):
        HorizontalPosition(0, 360)
    with pytest.raises(ValueError):
        HorizontalPosition(0, -181)


def test_full_position():
    """
    Check radius rounding, depth conversion and conversions between
    horizontal and full positions
    """
    position = FullPosition(10, 20, 3505.0000001)
    assert(position.radius == 3505)
    assert(position.to_horizontal_position() == HorizontalPosition(10, 20))
    assert(FullPosition.from_depth(0, 0, 100).radius == 6271)
    assert(position.to_full_position(3555).radius == 3555)
    assert(str(FullPosition(1, 2, 3)) == "1.0000 2.0000 3.000000")

    with pytest.raises(ValueError):
        FullPosition(0, 0, -1)

    xyz = FullPosition(0, 90, 100).to_xyz()
    assert(xyz == pytest.approx([0, 100, 0], abs=1e-9))


def test_distance_and_azimuth():
    """
    Epicentral distances and azimuths along the equator and the meridians
    """
    origin = HorizontalPosition(0, 0)
    assert(origin.epicentral_distance(HorizontalPosition(0, 90)) ==
           pytest.approx(90))
    assert(origin.azimuth(HorizontalPosition(0, 10)) == pytest.approx(90))
    assert(origin.azimuth(HorizontalPosition(10, 0)) == pytest.approx(0))
    assert(origin.azimuth(HorizontalPosition(0, -10)) == pytest.approx(270))
    assert(azimuth(0, 0, -10, 0) == pytest.approx(180))


def test_point_along_azimuth():
    """
    Moving along a great circle reaches the expected positions, and the
    longitude is wrapped across the date line
    """
    lat, lon = point_along_azimuth(0, 0, 90, 10)
    assert(lat == pytest.approx(0, abs=1e-9))
    assert(lon == pytest.approx(10))

    lat, lon = point_along_azimuth(0, 0, 0, 30)
    assert(lat == pytest.approx(30))
    assert(lon == pytest.approx(0, abs=1e-9))

    position = HorizontalPosition(0, 175).point_along_azimuth(90, 10)
    assert(position == HorizontalPosition(0, -175))

    assert(normalize_longitude(540) == -180)
    assert(np.allclose(normalize_longitude(np.array([190, -190])), 
                       [-170, 170]))


def test_sector_volume():
    """
    The volume of a sector spanning the whole sphere is the volume of the
    ball; latitudes beyond the poles are clipped
    """
    ball = sector_volume(50, 100, 0, 180, 360)
    assert(ball == pytest.approx(4 / 3 * np.pi * 100**3))

    # A cap around the pole, clipped at 90 degrees
    clipped = sector_volume(50, 100, 90, 20, 360)
    cap = sector_volume(50, 100, 85, 10, 360)
    assert(clipped == pytest.approx(cap))

    with pytest.raises(ValueError):
        sector_volume(10, 50, 0, 5, 5)
    with pytest.raises(ValueError):
        sector_volume(3500, 0, 0, 5, 5)


def test_horizontal_pixel():
    """
    Pixels are value objects; their extents must be positive
    """
    pixel = HorizontalPixel((10, 20), 5, 2.5)
    assert(pixel.position == HorizontalPosition(10, 20))
    assert(pixel.latitude == 10 and pixel.longitude == 20)
    assert(pixel == HorizontalPixel(HorizontalPosition(10, 20), 5.0, 2.5))
    assert(str(pixel) == "10.0000 20.0000 5.0 2.5")
    assert(pixel.volume(3505, 50) == 
           pytest.approx(sector_volume(3505, 50, 10, 5, 2.5)))

    with pytest.raises(ValueError):
        HorizontalPixel((0, 0), 0, 5)
    with pytest.raises(ValueError):
        HorizontalPixel((0, 0), 5, -1)


def test_observer():
    """
    Observers are identified by station, network and position
    """
    observer = Observer("ABC", "XY", (10, 20))
    assert(observer.position == HorizontalPosition(10, 20))
    assert(observer.code == "ABC_XY")
    assert(str(observer) == "ABC XY 10.0000 20.0000")
    with pytest.raises(ValueError):
        Observer("A B", "XY", (0, 0))
