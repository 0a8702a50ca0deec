"""
Test the utility functions: file writing, output paths and messages
"""
import os
import pytest

from dsmlib.utils import (generate_output_path, numbered, 
                          read_information_lines, write_lines, write_bytes,
                          normalize_longitude)


def test_write_lines(tmpdir):
    """
    Files are written once; an existing file is left untouched and no 
    temporary file remains
    """
    path = os.path.join(tmpdir, "lines.txt")
    write_lines(path, ["# comment", "", "a b", "  c  "])
    assert(read_information_lines(path) == ["a b", "c"])

    with pytest.raises(FileExistsError):
        write_lines(path, ["d"])
    assert(read_information_lines(path) == ["a b", "c"])
    assert(os.listdir(tmpdir) == ["lines.txt"])

    write_lines(path, ["d"], overwrite=True)
    assert(read_information_lines(path) == ["d"])


def test_failed_write_leaves_nothing(tmpdir):
    """
    A failure while writing removes the temporary file
    """
    def chunks():
        yield b"abc"
        raise RuntimeError("interrupted")

    path = os.path.join(tmpdir, "data.bin")
    with pytest.raises(RuntimeError):
        write_bytes(path, chunks())
    assert(os.listdir(tmpdir) == [])


def test_generate_output_path(tmpdir):
    """
    Output names are built from name, tag and date, and never refer to an 
    existing file
    """
    path = generate_output_path(str(tmpdir), "voxel", tag="test", 
                                append_date=False)
    assert(os.path.basename(path) == "voxel_test.inf")
    path = generate_output_path(str(tmpdir), "voxel")
    assert(os.path.basename(path).startswith("voxel_"))
    assert(len(os.path.basename(path)) == len("voxel_20200101000000.inf"))

    write_lines(os.path.join(tmpdir, "voxel.inf"), ["x"])
    with pytest.raises(FileExistsError):
        generate_output_path(str(tmpdir), "voxel", append_date=False)


def test_numbered():
    assert(numbered(1, "voxel", "voxels") == "1 voxel")
    assert(numbered(0, "entry", "entries") == "0 entries")


def test_normalize_longitude():
    assert(normalize_longitude(180) == -180)
    assert(normalize_longitude(190) == -170)
    assert(normalize_longitude(-190) == 170)
