"""Provide the exceptions raised by :mod:`distvec`.

.. autoexception:: DistvecError
.. autoexception:: MapConstructionError
.. autoexception:: MapInvariantError
.. autoexception:: IncompatibleMapError
.. autoexception:: ApplicationOptionsError
"""

__copyright__ = """
Copyright (C) 2026 University of Illinois Board of Trustees
"""

__license__ = """
Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
"""


class DistvecError(RuntimeError):
    """Exception base class for distvec exceptions."""

    pass


class MapConstructionError(DistvecError, ValueError):
    """Invalid input to an :class:`~distvec.maps.IndexMap` constructor.

    .. attribute:: rank

        The :class:`int` rank of the process that detected the problem, or
        *None* if it was detected collectively.
    """

    def __init__(self, message, rank=None):
        self.rank = rank
        if rank is not None:
            message = f"[rank {rank}] {message}"
        super().__init__(message)


class MapInvariantError(DistvecError):
    """A map does not have a layout property it is expected to have."""

    pass


class IncompatibleMapError(DistvecError):
    """Vectors on incompatible maps were combined.

    .. attribute:: relation

        The :class:`~distvec.maps.MapRelation` found between the two maps.
    """

    def __init__(self, message, relation=None):
        self.relation = relation
        super().__init__(message)


class ApplicationOptionsError(DistvecError):
    """Application command-line or input file options error."""

    pass
