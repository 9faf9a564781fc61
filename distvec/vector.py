""":mod:`distvec.vector` provides vectors distributed according to an index map.

Each rank stores the entries of the global indices it owns, in the order given
by :attr:`distvec.maps.IndexMap.my_global_indices`. Entrywise operations act
on the local entries only; reductions (dot products, norms, means) are
collective and return the same value on every rank.

.. autoclass:: DistributedVector
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
import logging
from typing import Optional

import numpy as np

from distvec.exceptions import IncompatibleMapError
from distvec.maps import IndexMap
from distvec.simutil import global_reduce


logger = logging.getLogger(__name__)


class DistributedVector:
    """A vector with one value per entry of an :class:`~distvec.maps.IndexMap`.

    .. automethod:: __init__
    .. automethod:: from_local_array
    .. automethod:: copy
    .. automethod:: put_scalar
    .. automethod:: randomize
    .. automethod:: scale
    .. automethod:: update
    .. automethod:: dot
    .. automethod:: norm1
    .. automethod:: norm2
    .. automethod:: norm_inf
    .. automethod:: mean_value
    .. automethod:: replace_global_value
    .. automethod:: sum_into_global_value
    .. automethod:: local_view
    .. automethod:: gather
    """

    def __init__(self, imap: IndexMap, zero_out: bool = True, dtype=np.float64):
        """Allocate the local entries of a vector on *imap*.

        Parameters
        ----------
        imap
            The :class:`~distvec.maps.IndexMap` describing the distribution.
        zero_out
            If *False*, leave the entries uninitialized, to be filled later.
        """
        self.imap = imap
        if zero_out:
            self._data = np.zeros(imap.num_local, dtype=dtype)
        else:
            self._data = np.empty(imap.num_local, dtype=dtype)

    @classmethod
    def from_local_array(cls, imap: IndexMap, local_values,
                         dtype=np.float64) -> "DistributedVector":
        """Create a vector on *imap* holding a copy of *local_values*.

        The entries are converted to *dtype*, so integer input gives a
        floating point vector unless another *dtype* is requested.
        """
        local_values = np.asarray(local_values)
        if local_values.shape != (imap.num_local,):
            raise ValueError(
                f"expected {imap.num_local} local values, "
                f"got array of shape {local_values.shape}")

        vec = cls(imap, zero_out=False, dtype=dtype)
        vec._data[:] = local_values
        return vec

    @property
    def comm(self):
        return self.imap.comm

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def num_local(self) -> int:
        return self.imap.num_local

    @property
    def num_global(self) -> int:
        return self.imap.num_global

    def copy(self) -> "DistributedVector":
        """Return a deep copy on the same map."""
        return type(self).from_local_array(self.imap, self._data)

    def __repr__(self):
        return (f"{type(self).__name__}(num_global={self.num_global}, "
                f"num_local={self.num_local}, rank={self.imap.rank})")

    # {{{ fill

    def put_scalar(self, value) -> None:
        """Set every local entry to *value*."""
        self._data.fill(value)

    def randomize(self, seed: Optional[int] = None) -> None:
        """Fill the local entries with uniform pseudo-random values in [-1, 1).

        With a *seed*, every rank draws from a stream derived from
        ``(seed, rank)``, so the result is reproducible for a fixed number of
        ranks. Without one, fresh OS entropy is used. The generator is not
        meant to be a high quality parallel random number generator.
        """
        if seed is None:
            rng = np.random.default_rng()
        else:
            rng = np.random.default_rng(
                np.random.SeedSequence(seed, spawn_key=(self.imap.rank,)))

        self._data[:] = rng.uniform(-1.0, 1.0, size=self.num_local)

    # }}}

    # {{{ linear algebra

    def _check_compatible(self, other: "DistributedVector") -> None:
        relation = self.imap.compare(other.imap)
        if not relation.is_compatible:
            raise IncompatibleMapError(
                f"vector maps are not compatible: {self.imap!r} vs. {other.imap!r}",
                relation=relation)

    def scale(self, alpha) -> None:
        """Compute ``self = alpha*self``."""
        self._data *= alpha

    def update(self, alpha, a: "DistributedVector", beta,
               b: Optional["DistributedVector"] = None, gamma=None) -> None:
        """Replace *self* by a linear combination.

        With two vectors, compute ``self = gamma*self + alpha*a + beta*b``.
        With one, compute ``self = beta*self + alpha*a``. A zero coefficient on
        *self* discards the old entries, so NaNs in them do not propagate.

        The maps of *a* and *b* must be compatible with the map of *self*,
        though not necessarily identical.

        Raises
        ------
        :class:`~distvec.exceptions.IncompatibleMapError`
        """
        if b is None:
            if gamma is not None:
                raise TypeError("gamma given without a second vector")
            self._check_compatible(a)
            result = alpha * a._data
            self_coeff = beta
        else:
            if gamma is None:
                raise TypeError("two-vector update requires gamma")
            self._check_compatible(a)
            self._check_compatible(b)
            result = alpha * a._data
            result += beta * b._data
            self_coeff = gamma

        if self_coeff != 0:
            result += self_coeff * self._data

        self._data[:] = result

    def dot(self, other: "DistributedVector"):
        """Return the global dot product of *self* and *other*.

        .. note::
            This is a collective routine and must be called by all MPI ranks.
        """
        self._check_compatible(other)
        local = np.dot(np.conj(self._data), other._data).item()
        return global_reduce(local, "sum", comm=self.comm)

    def norm1(self) -> float:
        """Return the global 1-norm. Collective."""
        local = float(np.sum(np.abs(self._data)))
        return float(global_reduce(local, "sum", comm=self.comm))

    def norm2(self) -> float:
        """Return the global Euclidean norm. Collective.

        The entries are scaled by the maximum norm before squaring so that
        large entries do not overflow.
        """
        scale = self.norm_inf()
        if scale == 0.0 or not np.isfinite(scale):
            return scale
        local = float(np.sum((np.abs(self._data) / scale)**2))
        return scale * float(np.sqrt(global_reduce(local, "sum", comm=self.comm)))

    def norm_inf(self) -> float:
        """Return the global maximum norm. Collective."""
        local = float(np.max(np.abs(self._data))) if self.num_local else 0.0
        return float(global_reduce(local, "max", comm=self.comm))

    def mean_value(self):
        """Return the mean of all global entries. Collective.

        Returns 0 for a vector without entries.
        """
        local = np.sum(self._data).item()
        total = global_reduce(local, "sum", comm=self.comm)
        if self.num_global == 0:
            return 0.0
        return total / self.num_global

    # }}}

    # {{{ entry access

    def _owned_local_index(self, gid) -> int:
        lid = self.imap.global_to_local(gid)
        if lid is None:
            raise KeyError(
                f"global index {gid} is not owned by rank {self.imap.rank}")
        return lid

    def replace_global_value(self, gid, value) -> None:
        """Set the entry at global index *gid*, which this rank must own."""
        self._data[self._owned_local_index(gid)] = value

    def sum_into_global_value(self, gid, value) -> None:
        """Add *value* to the entry at global index *gid*, which this rank must own."""
        self._data[self._owned_local_index(gid)] += value

    def local_view(self) -> np.ndarray:
        """Return a writable view of the local entries."""
        return self._data.view()

    def gather(self, root: int = 0) -> Optional[np.ndarray]:
        """Collect all entries, ordered by global index, on rank *root*.

        Returns *None* on all other ranks.

        .. note::
            This is a collective routine and must be called by all MPI ranks.
        """
        gids = self.imap.my_global_indices
        if self.comm is None:
            parts = [(gids, self._data)]
        else:
            parts = self.comm.gather((gids, self._data), root=root)
            if self.imap.rank != root:
                return None

        result = np.empty(self.num_global, dtype=self.dtype)
        for part_gids, part_values in parts:
            result[part_gids - self.imap.index_base] = part_values
        return result

    # }}}

# vim: foldmethod=marker
