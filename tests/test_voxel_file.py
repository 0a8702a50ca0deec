"""
Test the voxel information file, combining layers and horizontal pixels
"""
import os
import numpy as np
import pytest

from dsmlib.exceptions import DuplicateParameterException
from dsmlib.exceptions import DuplicateParameterWarning
from dsmlib.utils import sector_volume
from dsmlib.voxel import LayerInformationFile, VoxelInformationFile
from dsmlib.voxel import HorizontalPixel, FullPosition
from dsmlib.parameter import Physical3DParameter, VariableType


@pytest.fixture
def voxels():
    """
    Two layers between 3480 and 3580 km, and two horizontal pixels
    """
    layers = LayerInformationFile.from_border_radii([3480, 3530, 3580])
    pixels = [HorizontalPixel((10, 20), 5, 5),
              HorizontalPixel((-2.5, 177.5), 5, 2.5)]
    return VoxelInformationFile(layers.thicknesses, layers.radii, pixels)


def test_voxel_count_and_positions(voxels):
    """
    Two layers and two pixels make four distinct voxels
    """
    assert(voxels.n_voxels == 4)
    positions = voxels.full_position_set()
    assert(len(positions) == 4)
    assert(FullPosition(10, 20, 3505) in positions)
    assert(FullPosition(-2.5, 177.5, 3555) in positions)


def test_write_read(tmpdir, voxels):
    """
    Radii, thicknesses and pixels (in their order) survive a round trip
    """
    path = os.path.join(tmpdir, "voxel.inf")
    voxels.write(path)
    voxels_read = VoxelInformationFile.read(path)
    assert(voxels_read == voxels)
    assert(voxels_read.pixels == voxels.pixels)
    assert(np.array_equal(voxels_read.radii, [3505, 3555]))

    with open(path) as f:
        lines = f.read().splitlines()
    assert(len(lines) == 7)
    assert(lines[4].startswith("# horizontal rectangle on sphere [deg]"))
    assert(lines[5] == "10.0000 20.0000 5.0 5.0")


def test_read_ignores_comments_and_blank_lines(tmpdir):
    """
    Comments and blank lines may appear anywhere
    """
    path = os.path.join(tmpdir, "voxel.inf")
    with open(path, "w") as f:
        f.write("# thicknesses\n100\n\n# radii\n3530\n# pixels\n"
                "0 0 5 5\n\n  # another comment\n0 5 5 5\n")
    voxels = VoxelInformationFile.read(path)
    assert(voxels.n_voxels == 2)
    assert(voxels.horizontal_positions[1].longitude == 5)


def test_read_rejects_mismatching_layers(tmpdir):
    """
    The numbers of thicknesses and radii must match
    """
    path = os.path.join(tmpdir, "voxel.inf")
    with open(path, "w") as f:
        f.write("50 50\n3505\n0 0 5 5\n")
    with pytest.raises(ValueError):
        VoxelInformationFile.read(path)


def test_to_unknown_parameters(voxels):
    """
    Parameters are ordered by variable type, pixel and radius, and are
    weighted by the voxel volume
    """
    parameters = voxels.to_unknown_parameters(["Vs", "Vp"])
    assert(len(parameters) == 8)
    assert(all(isinstance(p, Physical3DParameter) for p in parameters))
    assert([p.variable_type for p in parameters] == 
           [VariableType.Vs] * 4 + [VariableType.Vp] * 4)
    assert([p.position for p in parameters[:4]] == 
           [FullPosition(10, 20, 3505), FullPosition(10, 20, 3555),
            FullPosition(-2.5, 177.5, 3505), FullPosition(-2.5, 177.5, 3555)])
    assert(parameters[0].size == 
           pytest.approx(sector_volume(3505, 50, 10, 5, 5)))
    assert(parameters[3].size == 
           pytest.approx(sector_volume(3555, 50, -2.5, 5, 2.5)))


def test_repeated_pixels_are_reported(voxels):
    """
    A pixel listed twice gives duplicate unknowns, which are reported (or 
    rejected in strict mode) while the list is kept as it is
    """
    pixels = voxels.pixels + [voxels.pixels[0]]
    repeated = VoxelInformationFile(voxels.thicknesses, voxels.radii, pixels)
    with pytest.warns(DuplicateParameterWarning):
        parameters = repeated.to_unknown_parameters(["Vs"])
    assert(len(parameters) == 6)
    with pytest.raises(DuplicateParameterException):
        repeated.to_unknown_parameters(["Vs"], strict=True)


def test_layers(voxels):
    """
    The radial discretization of the grid is available as layers
    """
    layers = voxels.layers()
    assert(layers == LayerInformationFile([50, 50], [3505, 3555]))
