#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions and warnings raised by DSMLib.
"""

__all__ = ['DuplicateParameterException',
           'ParameterFormatException',
           'MissingEventException',
           'VolumeComputationException',
           'DuplicateParameterWarning',
           'SkippedItemWarning']



class DuplicateParameterException(Exception):
    """
    Exception raised when a list of parameters, which defines the columns
    of the inversion matrix, contains the same parameter more than once.
    """

    def __init__(self, *args):
        self.message = 'Duplicate parameters found.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ParameterFormatException(Exception):
    """
    Exception raised when a line of a parameter file cannot be parsed.
    """

    def __init__(self, *args, message=None):
        if message is not None:
            self.message = message
        else:
            self.message = 'Invalid parameter line.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class MissingEventException(KeyError):
    """
    Exception raised when an event ID is not found in the event catalog.
    """

    def __init__(self, event_id):
        self.event_id = event_id
        self.message = 'Event %s not found in the catalog.'%event_id
        super().__init__(self.message)

    def __str__(self):
        return self.message


class VolumeComputationException(Exception):
    """
    Exception raised when the volume of one or more perturbation points
    could not be computed.
    """

    def __init__(self, errors):
        self.errors = errors
        self.message = 'Volume computation failed for %d point(s).'%len(errors)
        for position, error in errors.items():
            self.message += '\n%s: %r'%(position, error)
        super().__init__(self.message)

    def __str__(self):
        return self.message


class DuplicateParameterWarning(UserWarning):
    """
    Warning issued when duplicate parameters are found but tolerated.
    """


class SkippedItemWarning(UserWarning):
    """
    Warning issued when an item of a batch is skipped.
    """
