#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Parameter Files
===============

An unknown parameter file lists the unknowns of the inversion, one per line.
The order of the lines defines the order of the columns of the matrix
:math:`\mathbf{A}`, and every file derived from it later on (partial 
derivatives, solutions) refers to the same order. For this reason 
parameters are always handled as ordered lists, and never reordered.

A known parameter file has the same format, with one additional value at
the end of each line (e.g., the solution of the inversion).

Duplicate parameters would silently produce identical columns in the matrix
:math:`\mathbf{A}`. They are reported through a 
:class:`dsmlib.exceptions.DuplicateParameterWarning` (one per pair of 
duplicates) when reading a file, or refused altogether if `strict=True`.
"""
import warnings
from collections import namedtuple, defaultdict
import numpy as np
from dsmlib.exceptions import DuplicateParameterException
from dsmlib.exceptions import DuplicateParameterWarning
from dsmlib.exceptions import ParameterFormatException
from dsmlib.utils import read_information_lines, write_lines, write_bytes
from dsmlib.utils import numbered, log
from dsmlib.parameter.unknown import construct_parameter_from_parts
from dsmlib.parameter.unknown import pack_parameter, unpack_parameter

__all__ = ['find_duplicates',
           'check_duplicates',
           'ParameterIndex',
           'UnknownParameterFile',
           'KnownParameter',
           'KnownParameterFile']



def find_duplicates(parameters):
    """ Pairs of indexes (i, j), i < j, of equal parameters
    
    Parameters
    ----------
    parameters : sequence of :class:`dsmlib.parameter.UnknownParameter`
    
    Returns
    -------
    list of tuple
        Sorted by j, then by i
    """
    seen = defaultdict(list)
    duplicates = []
    for j, parameter in enumerate(parameters):
        duplicates.extend((i, j) for i in seen[parameter])
        seen[parameter].append(j)
    return duplicates


def check_duplicates(parameters, strict=False, source=None):
    """ Reports duplicate parameters
    
    Parameters
    ----------
    parameters : sequence of :class:`dsmlib.parameter.UnknownParameter`
    
    strict : bool
        If `True`, duplicates raise an exception. Otherwise (default), a
        :class:`dsmlib.exceptions.DuplicateParameterWarning` is issued for 
        each pair of duplicates
        
    source : str, optional
        Name of the file the parameters come from, used in the messages
        
    Returns
    -------
    int
        Number of pairs of duplicates
        
    Raises
    ------
    DuplicateParameterException
        If `strict` is `True` and duplicates are found
    """
    duplicates = find_duplicates(parameters)
    where = ' in %s'%source if source is not None else ''
    messages = ['%s is duplicated%s (entries %d and %d)'%(parameters[i], where,
                                                         i, j)
                for i, j in duplicates]
    if duplicates and strict:
        raise DuplicateParameterException(*messages)
    for message in messages:
        warnings.warn(message, DuplicateParameterWarning, stacklevel=3)
    return len(duplicates)



class ParameterIndex:
    """ 
    Position of each parameter in an ordered list, for constant-time lookups
    
    Parameters
    ----------
    parameters : iterable of :class:`dsmlib.parameter.UnknownParameter`
    
    Raises
    ------
    DuplicateParameterException
        If a parameter appears more than once, since its position would be 
        ambiguous
        
        
    Examples
    --------
    >>> index = ParameterIndex(parameters)
    >>> parameters[3] in index
    True
    >>> index.index_of(parameters[3])
    3
    """
    
    def __init__(self, parameters):
        self._parameters = list(parameters)
        check_duplicates(self._parameters, strict=True)
        self._index = {p: i for i, p in enumerate(self._parameters)}


    def __len__(self):
        return len(self._parameters)


    def __contains__(self, parameter):
        return parameter in self._index


    def __iter__(self):
        return iter(self._parameters)


    def index_of(self, parameter):
        """ Position of `parameter` in the list
        
        Raises
        ------
        KeyError
            If the parameter is not in the list
        """
        try:
            return self._index[parameter]
        except KeyError:
            raise KeyError('%s not found'%parameter) from None



class UnknownParameterFile:
    """
    Ordered list of unknown parameters
    
    Parameters
    ----------
    parameters : iterable of :class:`dsmlib.parameter.UnknownParameter`
    
    verbose : bool
        If `True`, the number of parameters read or written is displayed (in
        the standard error). Default is `False`
        
        
    Examples
    --------
    >>> from dsmlib.parameter import UnknownParameterFile
    >>> unknowns = UnknownParameterFile.read('/path/to/unknowns.lst')
    >>> len(unknowns)
    2
    >>> for parameter in unknowns:
    ...     print(parameter)
    VOXEL Vs 0.0 0.0 3505.0 1234.5
    VOXEL Vs 0.0 0.0 3555.0 1296.7
    """
    
    def __init__(self, parameters, verbose=False):
        self._parameters = list(parameters)
        self.verbose = verbose


    def __repr__(self):
        return 'UnknownParameterFile(%s)'%numbered(len(self), 'parameter', 
                                                   'parameters')


    def __len__(self):
        return len(self._parameters)


    def __iter__(self):
        return iter(self._parameters)


    def __getitem__(self, i):
        return self._parameters[i]


    def __eq__(self, other):
        if not isinstance(other, UnknownParameterFile):
            return NotImplemented
        return self._parameters == other._parameters

    __hash__ = None


    @property
    def parameters(self):
        return list(self._parameters)


    @classmethod
    def read(cls, path, strict=False, verbose=False):
        """ Reads an unknown parameter file
        
        Parameters
        ----------
        path : str
        
        strict : bool
            If `True`, duplicate parameters raise an exception. Otherwise 
            (default) they are kept, and a warning is issued
            
        verbose : bool
        
        Returns
        -------
        :class:`UnknownParameterFile`
        
        Raises
        ------
        ParameterFormatException
            If a line cannot be parsed
        """
        parameters = [_parse_line(line, path) 
                      for line in read_information_lines(path)]
        check_duplicates(parameters, strict=strict, source=path)
        log('%s read from %s'%(numbered(len(parameters), 'parameter', 
                                        'parameters'), path), verbose)
        return cls(parameters, verbose=verbose)


    @classmethod
    def read_binary(cls, path, strict=False, verbose=False):
        """ Reads a file written by :meth:`write_binary`
        """
        with open(path, 'rb') as f:
            buffer = f.read()
        parameters = []
        offset = 0
        while offset < len(buffer):
            parameter, offset = unpack_parameter(buffer, offset)
            parameters.append(parameter)
        check_duplicates(parameters, strict=strict, source=path)
        log('%s read from %s'%(numbered(len(parameters), 'parameter', 
                                        'parameters'), path), verbose)
        return cls(parameters, verbose=verbose)


    def write(self, path, overwrite=False):
        """ Writes the parameters, one per line, in their order
        
        Parameters
        ----------
        path : str
        
        overwrite : bool
            If `False` (default), an existing file is never replaced
        """
        log('Outputting %s in %s'%(numbered(len(self), 'parameter', 
                                            'parameters'), path), self.verbose)
        write_lines(path, (str(p) for p in self._parameters), 
                    overwrite=overwrite)


    def write_binary(self, path, overwrite=False):
        """ 
        Writes the parameters as a sequence of self-describing binary records
        (see :func:`dsmlib.parameter.pack_parameter`)
        """
        log('Outputting %s in %s'%(numbered(len(self), 'parameter', 
                                            'parameters'), path), self.verbose)
        write_bytes(path, (pack_parameter(p) for p in self._parameters), 
                    overwrite=overwrite)


    def index(self):
        """ Lookup table of the parameter positions
        
        Returns
        -------
        :class:`ParameterIndex`
        """
        return ParameterIndex(self._parameters)


def _parse_line(line, path):
    try:
        return construct_parameter_from_parts(line.split())
    except ParameterFormatException as e:
        raise ParameterFormatException('%s: %s'%(path, line), 
                                       message=e.message) from e



class KnownParameter(namedtuple('KnownParameter', ['parameter', 'value'])):
    """ Unknown parameter paired with a value (e.g., the solution of the 
    inversion)
    """
    __slots__ = ()

    def __new__(cls, parameter, value):
        return super().__new__(cls, parameter, float(value))


    def __str__(self):
        return '%s %r'%(self.parameter, self.value)


    @classmethod
    def from_parts(cls, parts):
        if len(parts) < 2:
            raise ParameterFormatException(' '.join(parts))
        try:
            value = float(parts[-1])
        except ValueError:
            raise ParameterFormatException(
                    ' '.join(parts), message='Invalid known value.') from None
        return cls(construct_parameter_from_parts(parts[:-1]), value)



class KnownParameterFile:
    """
    Ordered list of parameters with their values
    
    Parameters
    ----------
    known_parameters : iterable of :class:`KnownParameter` or of 
        (parameter, value) pairs
        
    verbose : bool
    
    
    Examples
    --------
    The values of a solution are typically paired with the unknowns they 
    were computed for
    
    >>> unknowns = UnknownParameterFile.read('/path/to/unknowns.lst')
    >>> KnownParameterFile.write_values(unknowns, solution, '/path/to/m.lst')
    """
    
    def __init__(self, known_parameters, verbose=False):
        self._known = [KnownParameter(*k) for k in known_parameters]
        self.verbose = verbose


    def __repr__(self):
        return 'KnownParameterFile(%s)'%numbered(len(self), 'parameter', 
                                                 'parameters')


    def __len__(self):
        return len(self._known)


    def __iter__(self):
        return iter(self._known)


    def __getitem__(self, i):
        return self._known[i]


    def __eq__(self, other):
        if not isinstance(other, KnownParameterFile):
            return NotImplemented
        return self._known == other._known

    __hash__ = None


    @classmethod
    def from_values(cls, parameters, values, verbose=False):
        """ Pairs the i-th parameter with the i-th value
        
        Parameters
        ----------
        parameters : sequence of :class:`dsmlib.parameter.UnknownParameter`
        
        values : array-like of shape (n,)
        
        Returns
        -------
        :class:`KnownParameterFile`
        
        Raises
        ------
        ValueError
            If the number of values differs from the number of parameters
        """
        parameters = list(parameters)
        values = np.asarray(values, dtype=np.float64).ravel()
        if len(parameters) != values.size:
            msg = 'The number of parameters (%d) and values (%d) does not match.'
            raise ValueError(msg%(len(parameters), values.size))
        return cls(zip(parameters, values), verbose=verbose)


    @classmethod
    def write_values(cls, parameters, values, path, overwrite=False, 
                     verbose=False):
        """ Writes the parameters paired with the values, see 
        :meth:`from_values`
        """
        known = cls.from_values(parameters, values, verbose=verbose)
        known.write(path, overwrite=overwrite)
        return known


    @classmethod
    def read(cls, path, strict=False, verbose=False):
        """ Reads a known parameter file
        
        Parameters
        ----------
        path : str
        
        strict : bool
            If `True`, duplicate parameters raise an exception. Otherwise 
            (default) they are kept, and a warning is issued
            
        verbose : bool
        
        Returns
        -------
        :class:`KnownParameterFile`
        """
        known = []
        for line in read_information_lines(path):
            try:
                known.append(KnownParameter.from_parts(line.split()))
            except ParameterFormatException as e:
                raise ParameterFormatException('%s: %s'%(path, line), 
                                               message=e.message) from e
        check_duplicates([k.parameter for k in known], strict=strict, 
                         source=path)
        log('%s read from %s'%(numbered(len(known), 'parameter', 'parameters'),
                               path), verbose)
        return cls(known, verbose=verbose)


    @property
    def parameters(self):
        return [k.parameter for k in self._known]


    @property
    def values(self):
        return np.array([k.value for k in self._known], dtype=np.float64)


    def write(self, path, overwrite=False):
        """ Writes the parameters and their values, one per line
        """
        log('Outputting %s in %s'%(numbered(len(self), 'parameter', 
                                            'parameters'), path), self.verbose)
        write_lines(path, (str(k) for k in self._known), overwrite=overwrite)
