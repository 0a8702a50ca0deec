"""
Test the construction of unknowns from lists of points, including the 
parallel computation of their volumes
"""
import os
import pytest

from dsmlib.exceptions import VolumeComputationException, SkippedItemWarning
from dsmlib.utils import sector_volume
from dsmlib.voxel import FullPosition, HorizontalPosition
from dsmlib.parameter import (HorizontalPoint, PerturbationPoint, 
                              UnknownParameterFile, UnknownParameterSetter,
                              VariableType, create_perturbation_point_file)


@pytest.fixture
def horizontal_point(tmpdir):
    path = os.path.join(tmpdir, "horizontalPoint.inf")
    with open(path, "w") as f:
        f.write("P001 0 0\nP002 0 5\nP003 10 0\n")
    return HorizontalPoint(path)


def test_horizontal_point(horizontal_point):
    """
    Named points are read in file order
    """
    assert(horizontal_point.names == ["P001", "P002", "P003"])
    assert(horizontal_point.position("P002") == HorizontalPosition(0, 5))
    assert("P004" not in horizontal_point)
    with pytest.raises(KeyError):
        horizontal_point.position("P004")


def test_perturbation_points(tmpdir, horizontal_point):
    """
    Each horizontal point is perturbed at each radius, and volumes are 
    computed for all of them
    """
    path = os.path.join(tmpdir, "perturbationPoint.inf")
    create_perturbation_point_file([3505, 3555], horizontal_point, path)
    points = PerturbationPoint(horizontal_point, path, dradius=50, 
                               dlatitude=5, dlongitude=5, verbose=False)
    assert(len(points) == 6)
    assert(points.names[:2] == ["P001", "P001"])
    assert(points.positions[1] == FullPosition(0, 0, 3555))

    volumes = points.compute_volumes(max_workers=2)
    assert(list(volumes) == points.positions)
    assert(volumes[FullPosition(10, 0, 3505)] == 
           pytest.approx(sector_volume(3505, 50, 10, 5, 5)))


def test_volume_errors_are_collected(tmpdir, horizontal_point):
    """
    Failing points are all reported at the end, or immediately in fail-fast
    mode
    """
    path = os.path.join(tmpdir, "perturbationPoint.inf")
    create_perturbation_point_file([10, 3505], horizontal_point, path)
    points = PerturbationPoint(horizontal_point, path, dradius=50, 
                               dlatitude=5, dlongitude=5, verbose=False)
    with pytest.raises(VolumeComputationException) as excinfo:
        points.compute_volumes()
    assert(len(excinfo.value.errors) == 3)
    assert(all(p.radius == 10 for p in excinfo.value.errors))

    with pytest.raises(ValueError):
        points.compute_volumes(fail_fast=True)


def test_create_unknown_parameter_file(tmpdir, horizontal_point):
    """
    Unknowns are written once; existing files are never overwritten
    """
    path = os.path.join(tmpdir, "perturbationPoint.inf")
    create_perturbation_point_file([3505], horizontal_point, path)
    points = PerturbationPoint(horizontal_point, path, dradius=50, 
                               dlatitude=5, dlongitude=5, verbose=False)
    unknown_path = os.path.join(tmpdir, "unknown.inf")
    unknowns = points.create_unknown_parameter_file(unknown_path)
    assert(len(unknowns) == 3)
    assert(all(p.variable_type is VariableType.MU for p in unknowns))
    assert(UnknownParameterFile.read(unknown_path) == unknowns)

    with pytest.raises(FileExistsError):
        points.create_unknown_parameter_file(unknown_path)


def test_nearest_locations(tmpdir, horizontal_point):
    """
    Perturbation points are sorted by distance from a location
    """
    path = os.path.join(tmpdir, "perturbationPoint.inf")
    create_perturbation_point_file([3505, 3555], horizontal_point, path)
    points = PerturbationPoint(horizontal_point, path, dradius=50, 
                               dlatitude=5, dlongitude=5, verbose=False)
    nearest = points.nearest_locations(FullPosition(0.5, 4.5, 3550))
    assert(nearest[0] == FullPosition(0, 5, 3555))
    assert(len(nearest) == 6)
    assert(points.nearest_locations(FullPosition(10, 0, 3500), k=1) == 
           [FullPosition(10, 0, 3505)])


def test_unknown_parameter_setter(tmpdir):
    """
    Points whose radius matches no layer are skipped with a warning
    """
    point_path = os.path.join(tmpdir, "points.txt")
    layer_path = os.path.join(tmpdir, "layers.txt")
    with open(point_path, "w") as f:
        f.write("0 0 3505\n0 5 3505\n0 0 3700\n")
    with open(layer_path, "w") as f:
        f.write("3505 50\n3555 50\n")
    setter = UnknownParameterSetter(point_path, layer_path, 5, verbose=False)
    with pytest.warns(SkippedItemWarning):
        parameters = setter.unknown_parameters(["Vs", "Vp"])
    assert(len(parameters) == 4)
    assert(parameters[0].size == 
           pytest.approx(sector_volume(3505, 50, 0, 5, 5)))
    assert(parameters[2].variable_type is VariableType.Vp)
