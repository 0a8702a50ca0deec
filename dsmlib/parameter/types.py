#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Kinds of parameters (:class:`ParameterType`) and of physical quantities
(:class:`VariableType`) that make up the unknown vector of the inversion.
"""
from enum import Enum
from dsmlib.exceptions import ParameterFormatException

__all__ = ['ParameterType', 'VariableType']



class _NamedEnum(Enum):
    
    def __str__(self):
        return self.name


    @classmethod
    def of(cls, value):
        """ Member of the enumeration from itself or from its name
        
        Raises
        ------
        ParameterFormatException
            If `value` is not a valid name
        """
        if isinstance(value, cls):
            return value
        try:
            return cls[value]
        except KeyError:
            msg = 'Unknown %s: %s'%(cls.__name__, value)
            raise ParameterFormatException(message=msg) from None



class ParameterType(_NamedEnum):
    """ Anchor of an unknown parameter: a layer, a voxel, a source or a
    receiver
    """
    LAYER = 0
    VOXEL = 1
    SOURCE = 2
    RECEIVER = 3


    @property
    def is_time_parameter(self):
        return self in (ParameterType.SOURCE, ParameterType.RECEIVER)



class VariableType(_NamedEnum):
    """ Physical quantities that can be unknowns of the inversion
    
    Elastic moduli and density, seismic velocities (including those of a 
    transversely isotropic medium), Love parameters, attenuation and travel
    time corrections.
    """
    RHO = 0
    Vp = 1
    Vs = 2
    Vb = 3
    LAMBDA = 4
    MU = 5
    LAMBDAplus2MU = 6
    KAPPA = 7
    Vpv = 8
    Vph = 9
    Vsv = 10
    Vsh = 11
    ETA = 12
    A = 13
    C = 14
    F = 15
    L = 16
    N = 17
    XI = 18
    Qmu = 19
    Qkappa = 20
    TIME = 21
