#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Unknown Parameters
==================

Each unknown parameter is one element of the model vector :math:`\mathbf{m}`
of the linear system :math:`\mathbf{A} \mathbf{m} = \mathbf{d}`. Four kinds
of parameters exist, distinguished by their 
:class:`dsmlib.parameter.ParameterType`:

- VOXEL (:class:`Physical3DParameter`): a physical quantity in a voxel, 
  weighted by the voxel volume (km^3)
- LAYER (:class:`Physical1DParameter`): a physical quantity in a spherical
  layer, weighted by the layer thickness (km)
- SOURCE (:class:`TimeSourceSideParameter`): a travel time correction 
  associated with an event
- RECEIVER (:class:`TimeReceiverSideParameter`): a travel time correction
  associated with a station (and a bouncing order)

Parameters are immutable and hashable. Two parameters are equal when they
are of the same kind and share variable type, location (or identity) and 
size.

Each parameter is written as a single line of text, starting with its 
parameter type::

    VOXEL <VariableType> <latitude> <longitude> <radius> <volume>
    LAYER <VariableType> <radius> <thickness>
    SOURCE TIME <eventID> <size>
    RECEIVER TIME <station> <network> <latitude> <longitude> <bouncingOrder> <size>

and :func:`construct_parameter_from_parts` is the exact inverse of this 
representation.

Binary records
--------------
:meth:`Physical3DParameter.to_bytes` produces a fixed-size record of 42 
bytes: the variable type name, padded with blanks to 10 bytes, followed by 
latitude, longitude, radius and volume as big-endian float64.

Any parameter can also be packed into a self-describing record 
(:func:`pack_parameter`)::

    b'UP' | version (uint8) | parameter type (uint8) | number of fields (uint8)
    
followed by the fields, each preceded by a one-byte tag: `d` (big-endian 
float64), `i` (big-endian int32) or `s` (uint16 length + UTF-8 text).
"""
import struct
from dsmlib.exceptions import ParameterFormatException, MissingEventException
from dsmlib.voxel.geometry import FullPosition, HorizontalPosition, Observer
from dsmlib.parameter.types import ParameterType, VariableType

__all__ = ['UnknownParameter',
           'Physical3DParameter',
           'Physical1DParameter',
           'TimeSourceSideParameter',
           'TimeReceiverSideParameter',
           'construct_parameter_from_parts',
           'convert_variable_type',
           'pack_parameter',
           'unpack_parameter']

VARIABLE_TYPE_BYTES = 10
RECORD_MAGIC = b'UP'
RECORD_VERSION = 1
_RECORD_HEADER = struct.Struct('>2sBBB')
_VOXEL_RECORD = struct.Struct('>%ds4d'%VARIABLE_TYPE_BYTES)



def _format_field(value):
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _parse_float(value):
    try:
        return float(value)
    except ValueError:
        raise ParameterFormatException(
                message='Invalid numeric value: %r'%value) from None


def _parse_int(value):
    try:
        return int(value)
    except ValueError:
        raise ParameterFormatException(
                message='Invalid integer value: %r'%value) from None


def _require_time(parameter_type, variable_type):
    if parameter_type.is_time_parameter \
            and VariableType.of(variable_type) is not VariableType.TIME:
        msg = 'Travel time corrections only accept TIME, got %s'
        raise ValueError(msg%variable_type)


def _parse_time_type(value):
    variable_type = VariableType.of(value)
    if variable_type is not VariableType.TIME:
        msg = 'Time parameters must have variable type TIME, got %s'%value
        raise ParameterFormatException(message=msg)
    return variable_type



class UnknownParameter:
    """ Base class of the unknown parameters
    
    Subclasses define the class attributes `parameter_type` and `n_parts` 
    (number of tokens in the text representation, parameter type included),
    and implement :meth:`position`, :meth:`_fields` and :meth:`from_parts`.
    """
    __slots__ = ('_variable_type', '_size')
    parameter_type = None
    n_parts = None

    def __init__(self, variable_type, size):
        self._variable_type = VariableType.of(variable_type)
        self._size = float(size)


    def __str__(self):
        parts = [self.parameter_type.name]
        parts.extend(_format_field(field) for field in self._fields())
        return ' '.join(parts)


    def __repr__(self):
        return '%s(%s)'%(type(self).__name__, self)


    def __eq__(self, other):
        if not isinstance(other, UnknownParameter):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()


    def __hash__(self):
        return hash((self.parameter_type, self._key()))


    @property
    def variable_type(self):
        return self._variable_type


    @property
    def size(self):
        """ Weight of the parameter: volume (km^3), thickness (km) or 1
        """
        return self._size


    @property
    def position(self):
        raise NotImplementedError


    def _fields(self):
        """ Values following the parameter type in the text and binary 
        representations
        """
        raise NotImplementedError


    def _key(self):
        return tuple(self._fields())


    @classmethod
    def from_parts(cls, parts):
        raise NotImplementedError


    def with_variable_type(self, variable_type):
        raise NotImplementedError



class Physical3DParameter(UnknownParameter):
    """ Physical quantity in a voxel
    
    Parameters
    ----------
    variable_type : :class:`dsmlib.parameter.VariableType` or str
    
    position : :class:`dsmlib.voxel.FullPosition`
        Center of the voxel. Tuples (lat, lon, r) are also accepted
        
    size : float
        Volume of the voxel (km^3)
    """
    __slots__ = ('_position',)
    parameter_type = ParameterType.VOXEL
    n_parts = 6

    def __init__(self, variable_type, position, size):
        super().__init__(variable_type, size)
        if not isinstance(position, FullPosition):
            position = FullPosition(*position)
        self._position = position


    @property
    def position(self):
        return self._position


    def _fields(self):
        return [self._variable_type.name, self._position.latitude, 
                self._position.longitude, self._position.radius, self._size]


    @classmethod
    def from_parts(cls, parts):
        position = FullPosition(*[_parse_float(p) for p in parts[2:5]])
        return cls(VariableType.of(parts[1]), position, _parse_float(parts[5]))


    def with_variable_type(self, variable_type):
        return Physical3DParameter(variable_type, self._position, self._size)


    def to_bytes(self):
        """ Fixed-size (42 bytes) binary record of the parameter
        
        Returns
        -------
        bytes

        Raises
        ------
        ValueError
            If the name of the variable type is longer than 10 characters
            (LAMBDAplus2MU)
        """
        if len(self._variable_type.name) > VARIABLE_TYPE_BYTES:
            msg = '%s does not fit in a %d-byte voxel record'
            raise ValueError(msg%(self._variable_type, VARIABLE_TYPE_BYTES))
        name = self._variable_type.name.ljust(VARIABLE_TYPE_BYTES)
        return _VOXEL_RECORD.pack(name.encode('ascii'), 
                                  self._position.latitude,
                                  self._position.longitude,
                                  self._position.radius,
                                  self._size)


    @classmethod
    def from_bytes(cls, record):
        """ Inverse of :meth:`to_bytes`
        
        Parameters
        ----------
        record : bytes
            Exactly 42 bytes
            
        Returns
        -------
        :class:`Physical3DParameter`
        """
        if len(record) != _VOXEL_RECORD.size:
            msg = 'A voxel record must have %d bytes, got %d'
            raise ParameterFormatException(
                    message=msg%(_VOXEL_RECORD.size, len(record)))
        name, lat, lon, r, size = _VOXEL_RECORD.unpack(record)
        variable_type = VariableType.of(name.decode('ascii').strip())
        return cls(variable_type, FullPosition(lat, lon, r), size)



class Physical1DParameter(UnknownParameter):
    """ Physical quantity in a spherical layer
    
    Parameters
    ----------
    variable_type : :class:`dsmlib.parameter.VariableType` or str
    
    radius : float
        Radius of the center of the layer (km)
        
    size : float
        Thickness of the layer (km)
    """
    __slots__ = ('_position',)
    parameter_type = ParameterType.LAYER
    n_parts = 4

    def __init__(self, variable_type, radius, size):
        super().__init__(variable_type, size)
        self._position = FullPosition(0, 0, radius)


    @property
    def position(self):
        """ Position at latitude and longitude 0, since only the radius is 
        meaningful for a layer
        """
        return self._position


    @property
    def radius(self):
        return self._position.radius


    def _fields(self):
        return [self._variable_type.name, self._position.radius, self._size]


    @classmethod
    def from_parts(cls, parts):
        return cls(VariableType.of(parts[1]), _parse_float(parts[2]), 
                   _parse_float(parts[3]))


    def with_variable_type(self, variable_type):
        return Physical1DParameter(variable_type, self.radius, self._size)



class TimeSourceSideParameter(UnknownParameter):
    """ Travel time correction associated with an event
    
    Parameters
    ----------
    event_id : str
        Identifier of the event (no whitespace allowed)
        
    hypocenter : :class:`dsmlib.voxel.FullPosition`, optional
        Hypocenter of the event. It is not part of the identity of the 
        parameter, and it can be attached later via :meth:`with_hypocenter`
        
    size : float
        Default is 1
    """
    __slots__ = ('_event_id', '_hypocenter')
    parameter_type = ParameterType.SOURCE
    n_parts = 4

    def __init__(self, event_id, hypocenter=None, size=1.0):
        super().__init__(VariableType.TIME, size)
        if not event_id or len(str(event_id).split()) != 1:
            raise ValueError('Invalid event ID: %r'%event_id)
        self._event_id = str(event_id)
        self._hypocenter = hypocenter


    @property
    def event_id(self):
        return self._event_id


    @property
    def position(self):
        """ Hypocenter of the event
        
        Raises
        ------
        MissingEventException
            If the hypocenter is unknown
        """
        if self._hypocenter is None:
            raise MissingEventException(self._event_id)
        return self._hypocenter


    def _fields(self):
        return [self._variable_type.name, self._event_id, self._size]


    @classmethod
    def from_parts(cls, parts):
        _parse_time_type(parts[1])
        return cls(parts[2], size=_parse_float(parts[3]))


    def with_hypocenter(self, hypocenter):
        return TimeSourceSideParameter(self._event_id, hypocenter, self._size)


    def with_variable_type(self, variable_type):
        _require_time(self.parameter_type, variable_type)
        return self



class TimeReceiverSideParameter(UnknownParameter):
    """ Travel time correction associated with a station
    
    Parameters
    ----------
    observer : :class:`dsmlib.voxel.Observer`
    
    bouncing_order : int
        Number of surface (or core) reflections the correction refers to
        
    size : float
        Default is 1
    """
    __slots__ = ('_observer', '_bouncing_order')
    parameter_type = ParameterType.RECEIVER
    n_parts = 8

    def __init__(self, observer, bouncing_order, size=1.0):
        super().__init__(VariableType.TIME, size)
        self._observer = observer
        self._bouncing_order = int(bouncing_order)


    @property
    def observer(self):
        return self._observer


    @property
    def bouncing_order(self):
        return self._bouncing_order


    @property
    def position(self):
        """ Position of the station, at radius 0
        """
        return self._observer.position.to_full_position(0)


    def _fields(self):
        position = self._observer.position
        return [self._variable_type.name, self._observer.station, 
                self._observer.network, position.latitude, position.longitude,
                self._bouncing_order, self._size]


    @classmethod
    def from_parts(cls, parts):
        _parse_time_type(parts[1])
        position = HorizontalPosition(_parse_float(parts[4]), 
                                      _parse_float(parts[5]))
        observer = Observer(parts[2], parts[3], position)
        return cls(observer, _parse_int(parts[6]), _parse_float(parts[7]))


    def with_variable_type(self, variable_type):
        _require_time(self.parameter_type, variable_type)
        return self


_PARAMETER_CLASSES = {cls.parameter_type: cls 
                      for cls in (Physical3DParameter, 
                                  Physical1DParameter,
                                  TimeSourceSideParameter,
                                  TimeReceiverSideParameter)}


def construct_parameter_from_parts(parts):
    """ Builds a parameter from the tokens of its text representation
    
    Parameters
    ----------
    parts : list of str or str
        Tokens (or the whole line). The first token is the parameter type, 
        which determines how the remaining ones are interpreted
        
    Returns
    -------
    :class:`UnknownParameter`
    
    Raises
    ------
    ParameterFormatException
        If the parameter type or variable type are unknown, if the number of
        tokens is wrong, or if a numeric value cannot be parsed
    """
    if isinstance(parts, str):
        parts = parts.split()
    if not parts:
        raise ParameterFormatException(message='Empty parameter line.')
    cls = _PARAMETER_CLASSES[ParameterType.of(parts[0])]
    if len(parts) != cls.n_parts:
        msg = '%s parameters consist of %d tokens, got %d: %s'
        raise ParameterFormatException(
                message=msg%(cls.parameter_type, cls.n_parts, len(parts), 
                             ' '.join(parts)))
    try:
        return cls.from_parts(parts)
    except ValueError as e:
        raise ParameterFormatException(' '.join(parts), message=str(e)) from e


def convert_variable_type(parameter, variable_type):
    """ 
    Parameter at the same location (with the same size) as `parameter`, but
    with a different variable type
    
    Parameters
    ----------
    parameter : :class:`UnknownParameter`
    
    variable_type : :class:`dsmlib.parameter.VariableType` or str
        For SOURCE and RECEIVER parameters, only TIME is allowed
        
    Returns
    -------
    :class:`UnknownParameter`
    """
    return parameter.with_variable_type(VariableType.of(variable_type))


def pack_parameter(parameter):
    """ Self-describing binary record of a parameter
    
    Parameters
    ----------
    parameter : :class:`UnknownParameter`
    
    Returns
    -------
    bytes
    """
    fields = parameter._fields()
    chunks = [_RECORD_HEADER.pack(RECORD_MAGIC, 
                                  RECORD_VERSION, 
                                  parameter.parameter_type.value, 
                                  len(fields))]
    for field in fields:
        if isinstance(field, float):
            chunks.append(b'd' + struct.pack('>d', field))
        elif isinstance(field, int):
            chunks.append(b'i' + struct.pack('>i', field))
        else:
            text = field.encode('utf-8')
            chunks.append(b's' + struct.pack('>H', len(text)) + text)
    return b''.join(chunks)


def unpack_parameter(buffer, offset=0):
    """ Reads a record written by :func:`pack_parameter`
    
    Parameters
    ----------
    buffer : bytes
    
    offset : int
        Position of the record in `buffer`
        
    Returns
    -------
    parameter : :class:`UnknownParameter`
    
    offset : int
        Position of the byte following the record
        
    Raises
    ------
    ParameterFormatException
        If the record is truncated, has a wrong magic number or an 
        unsupported version
    """
    try:
        magic, version, type_tag, nfields = _RECORD_HEADER.unpack_from(buffer, 
                                                                       offset)
        offset += _RECORD_HEADER.size
        if magic != RECORD_MAGIC:
            raise ParameterFormatException(
                    message='Invalid record magic number: %r'%magic)
        if version != RECORD_VERSION:
            raise ParameterFormatException(
                    message='Unsupported record version: %d'%version)
        parts = [ParameterType(type_tag).name]
        for _ in range(nfields):
            tag = buffer[offset:offset+1]
            offset += 1
            if tag == b'd':
                value, = struct.unpack_from('>d', buffer, offset)
                offset += 8
            elif tag == b'i':
                value, = struct.unpack_from('>i', buffer, offset)
                offset += 4
            elif tag == b's':
                length, = struct.unpack_from('>H', buffer, offset)
                offset += 2
                value = bytes(buffer[offset:offset+length]).decode('utf-8')
                if len(value.encode('utf-8')) != length:
                    raise struct.error('truncated text field')
                offset += length
            else:
                raise ParameterFormatException(
                        message='Invalid field tag: %r'%tag)
            parts.append(_format_field(value))
    except (struct.error, ValueError) as e:
        raise ParameterFormatException(message='Corrupted record: %s'%e) from e
    return construct_parameter_from_parts(parts), offset
