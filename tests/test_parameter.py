"""
Test the unknown parameter variants: text representation, dispatch by
parameter type, equality and binary records
"""
import struct
import pytest

from dsmlib.exceptions import ParameterFormatException, MissingEventException
from dsmlib.voxel import FullPosition, HorizontalPosition, Observer
from dsmlib.parameter import (ParameterType, VariableType, 
                              Physical3DParameter, Physical1DParameter,
                              TimeSourceSideParameter, 
                              TimeReceiverSideParameter,
                              construct_parameter_from_parts,
                              convert_variable_type,
                              pack_parameter, unpack_parameter)


@pytest.fixture
def parameters():
    """
    One representative parameter for each parameter type
    """
    observer = Observer("ABC", "XY", HorizontalPosition(35.5, -120.25))
    return [Physical3DParameter(VariableType.Vs, 
                                FullPosition(10, 20, 3505), 1234.5678),
            Physical1DParameter(VariableType.MU, 3555, 50),
            TimeSourceSideParameter("201001010000A"),
            TimeReceiverSideParameter(observer, 2)]


def test_text_representation(parameters):
    """
    Each variant is written with the expected tokens
    """
    assert(str(parameters[0]) == "VOXEL Vs 10.0 20.0 3505.0 1234.5678")
    assert(str(parameters[1]) == "LAYER MU 3555.0 50.0")
    assert(str(parameters[2]) == "SOURCE TIME 201001010000A 1.0")
    assert(str(parameters[3]) == 
           "RECEIVER TIME ABC XY 35.5 -120.25 2 1.0")


def test_dispatch(parameters):
    """
    Parsing the text representation gives back the same parameter, for 
    every parameter type
    """
    for parameter in parameters:
        parsed = construct_parameter_from_parts(str(parameter).split())
        assert(type(parsed) is type(parameter))
        assert(parsed == parameter)
        assert(str(parsed) == str(parameter))
    assert({p.parameter_type for p in parameters} == set(ParameterType))


def test_invalid_parts():
    """
    Unknown types, wrong numbers of tokens and non-numeric values are
    reported as format errors
    """
    invalid_lines = ["PIXEL Vs 0 0 3505 1",
                     "VOXEL Vq 0 0 3505 1",
                     "VOXEL Vs 0 0 3505",
                     "VOXEL Vs 0 zero 3505 1",
                     "VOXEL Vs 95 0 3505 1",
                     "LAYER Vs 3505 50 1",
                     "SOURCE Vs 201001010000A 1.0",
                     "RECEIVER TIME ABC XY 0 0 first 1.0",
                     ""]
    for line in invalid_lines:
        with pytest.raises(ParameterFormatException):
            construct_parameter_from_parts(line.split())


def test_positions(parameters):
    """
    Layer parameters lie at latitude and longitude 0, receiver parameters
    at radius 0, and source parameters at the hypocenter, when known
    """
    voxel, layer, source, receiver = parameters
    assert(voxel.position == FullPosition(10, 20, 3505))
    assert(layer.position == FullPosition(0, 0, 3555))
    assert(receiver.position == FullPosition(35.5, -120.25, 0))
    with pytest.raises(MissingEventException):
        source.position

    hypocenter = FullPosition(-10, 120, 6271)
    located = source.with_hypocenter(hypocenter)
    assert(located.position == hypocenter)
    assert(located == source)


def test_equality_includes_size():
    """
    Same type and location, different size: different parameters
    """
    position = FullPosition(0, 0, 3505)
    p1 = Physical3DParameter("Vs", position, 100)
    p2 = Physical3DParameter("Vs", position, 100.0)
    p3 = Physical3DParameter("Vs", position, 101)
    p4 = Physical3DParameter("Vp", position, 100)
    assert(p1 == p2 and hash(p1) == hash(p2))
    assert(p1 != p3)
    assert(p1 != p4)
    assert(len({p1, p2, p3, p4}) == 3)
    assert(Physical1DParameter("Vs", 3505, 100) != p1)


def test_convert_variable_type(parameters):
    """
    Voxel and layer parameters accept any variable type, time parameters 
    only TIME
    """
    voxel, layer, source, receiver = parameters
    assert([p.parameter_type.is_time_parameter for p in parameters] ==
           [False, False, True, True])
    converted = convert_variable_type(voxel, "RHO")
    assert(converted.variable_type is VariableType.RHO)
    assert(converted.position == voxel.position)
    assert(converted.size == voxel.size)
    assert(convert_variable_type(layer, VariableType.Vp).radius == 3555)
    assert(convert_variable_type(receiver, "TIME") == receiver)
    with pytest.raises(ValueError):
        convert_variable_type(source, "Vs")
    with pytest.raises(ValueError):
        convert_variable_type(receiver, VariableType.MU)


def test_voxel_bytes(parameters):
    """
    Voxel parameters are stored in 42 bytes: blank-padded variable type 
    followed by four big-endian doubles
    """
    voxel = parameters[0]
    record = voxel.to_bytes()
    assert(len(record) == 42)
    assert(record[:10] == b"Vs        ")
    assert(record[10:18] == struct.pack(">d", 10.0))
    assert(record[34:] == struct.pack(">d", 1234.5678))
    assert(Physical3DParameter.from_bytes(record) == voxel)

    # Names longer than 10 characters do not fit in the record
    long_name = Physical3DParameter("LAMBDAplus2MU", (0, 0, 3505), 1)
    with pytest.raises(ValueError):
        long_name.to_bytes()

    with pytest.raises(ParameterFormatException):
        Physical3DParameter.from_bytes(record[:-1])


def test_self_describing_records(parameters):
    """
    Every variant can be packed and unpacked, one record after the other
    """
    buffer = b"".join(pack_parameter(p) for p in parameters)
    offset = 0
    unpacked = []
    while offset < len(buffer):
        parameter, offset = unpack_parameter(buffer, offset)
        unpacked.append(parameter)
    assert(unpacked == parameters)
    assert(offset == len(buffer))

    record = pack_parameter(parameters[0])
    assert(record[:2] == b"UP")
    assert(record[2] == 1)
    assert(record[3] == ParameterType.VOXEL.value)
    assert(record[4] == 5)


def test_corrupted_records(parameters):
    """
    Truncated records, wrong magic numbers and unknown versions are 
    rejected
    """
    record = pack_parameter(parameters[3])
    with pytest.raises(ParameterFormatException):
        unpack_parameter(record[:-3])
    with pytest.raises(ParameterFormatException):
        unpack_parameter(b"XX" + record[2:])
    with pytest.raises(ParameterFormatException):
        unpack_parameter(record[:2] + b"\x09" + record[3:])
