""":mod:`distvec.maps` describes how a global index range is spread over ranks.

An :class:`IndexMap` assigns every global index in
``[index_base, index_base + num_global)`` to exactly one owning rank and gives
it a local offset on that rank. Maps are immutable: to change a data
distribution, build a new map.

Map construction and comparison are collective operations and must be called
on all ranks of the communicator, in the same order.

.. autoclass:: MapRelation
.. autoclass:: IndexMap
.. autofunction:: make_contiguous_map
.. autofunction:: make_cyclic_map
.. autofunction:: block_partition
.. autofunction:: cyclic_indices
.. autofunction:: check_example_maps
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
from enum import Enum
import logging
from typing import Optional, Tuple

import numpy as np
from pytools import memoize_method

from distvec.exceptions import MapConstructionError, MapInvariantError
from distvec.simutil import comm_rank_and_size, global_allgather, global_reduce


logger = logging.getLogger(__name__)

global_index_dtype = np.int64


class MapRelation(Enum):
    """How two maps relate to each other.

    .. attribute:: IDENTICAL

        Same global size and the same global indices on every rank.

    .. attribute:: COMPATIBLE

        Same global size and the same number of local entries on every rank,
        so that vectors on the two maps can be combined entrywise.

    .. attribute:: INCOMPATIBLE
    """

    IDENTICAL = "identical"
    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"

    @property
    def is_compatible(self) -> bool:
        """Return *True* for :attr:`IDENTICAL` and :attr:`COMPATIBLE`."""
        return self is not MapRelation.INCOMPATIBLE


def block_partition(num_global: int, nranks: int, rank: int) -> Tuple[int, int]:
    """Return ``(offset, count)`` of *rank* in a block partition.

    Every rank receives ``num_global // nranks`` entries, and the remainder is
    spread one entry each over the lowest ranks.
    """
    if nranks < 1:
        raise ValueError(f"nranks must be positive, got {nranks}")
    if not 0 <= rank < nranks:
        raise ValueError(f"rank {rank} out of range for {nranks} ranks")

    base, rem = divmod(num_global, nranks)
    count = base + 1 if rank < rem else base
    offset = rank*base + min(rank, rem)
    return offset, count


def cyclic_indices(num_global: int, nranks: int, rank: int,
                   index_base: int = 0) -> np.ndarray:
    """Return the global indices owned by *rank* in a round-robin partition.

    Rank *r* owns ``index_base + r + k*nranks`` for every *k* that keeps the
    index inside the global range.
    """
    if nranks < 1:
        raise ValueError(f"nranks must be positive, got {nranks}")
    if not 0 <= rank < nranks:
        raise ValueError(f"rank {rank} out of range for {nranks} ranks")

    return np.arange(index_base + rank, index_base + num_global, nranks,
                     dtype=global_index_dtype)


def _as_global_indices(my_global_indices) -> Tuple[np.ndarray, Optional[str]]:
    try:
        gids = np.asarray(my_global_indices)
    except (TypeError, ValueError) as e:
        return np.empty(0, dtype=global_index_dtype), f"invalid global index list: {e}"

    if gids.size == 0:
        return np.empty(0, dtype=global_index_dtype), None
    if gids.dtype.kind not in "iu":
        return (np.empty(0, dtype=global_index_dtype),
                f"global indices must be integers, got dtype {gids.dtype}")

    return np.array(gids, dtype=global_index_dtype), None


def _check_local_indices(gids, num_global, index_base) -> Optional[str]:
    if gids.ndim != 1:
        return f"global index list must be one-dimensional, got shape {gids.shape}"
    if len(gids) == 0:
        return None
    lo = gids.min()
    hi = gids.max()
    if lo < index_base or hi >= index_base + num_global:
        return (f"global indices must lie in [{index_base}, "
                f"{index_base + num_global}), got range [{lo}, {hi}]")
    if len(np.unique(gids)) != len(gids):
        return "global index list contains duplicates"
    return None


class IndexMap:
    """A 1-to-1 assignment of global indices to ranks.

    .. automethod:: __init__
    .. automethod:: compare
    .. automethod:: is_compatible
    .. automethod:: is_same_as
    .. automethod:: global_to_local
    .. automethod:: local_to_global
    .. automethod:: is_node_global_element
    .. automethod:: describe

    .. attribute:: comm

        The :mod:`mpi4py` communicator, or *None* for a serial map.

    .. attribute:: num_global
    .. attribute:: index_base
    .. attribute:: counts

        A :class:`tuple` holding the number of local entries of every rank.

    .. attribute:: is_contiguous

        *True* if every rank owns one ascending run of global indices and the
        runs follow each other in rank order.
    """

    def __init__(self, num_global, my_global_indices, index_base=0, comm=None):
        """Build a map from the list of global indices owned by this rank.

        This is a collective operation. Contiguity is detected from the
        indices, so a list that happens to be contiguous yields a contiguous
        map.

        Raises
        ------
        :class:`~distvec.exceptions.MapConstructionError`
            On all ranks, if any rank passed indices outside of the global
            range or duplicated indices, or if the local index counts do not
            add up to *num_global*.
        """
        num_global = int(num_global)
        index_base = int(index_base)
        rank, nranks = comm_rank_and_size(comm)

        if num_global < 0:
            raise MapConstructionError(
                f"number of global elements must be non-negative, got {num_global}")

        gids, error = _as_global_indices(my_global_indices)
        if error is None:
            error = _check_local_indices(gids, num_global, index_base)

        if error is None and len(gids):
            is_run = bool(np.all(np.diff(gids) == 1))
            first = int(gids[0])
            local_range = (int(gids.min()), int(gids.max()))
        else:
            is_run = True
            first = None
            local_range = None

        # one collective gathers everything the layout checks need
        layout = global_allgather(
            (error, len(gids), is_run, first, local_range), comm=comm)

        for other_rank, (other_error, *_) in enumerate(layout):
            if other_error is not None:
                raise MapConstructionError(other_error, rank=other_rank)

        counts = tuple(entry[1] for entry in layout)
        if sum(counts) != num_global:
            raise MapConstructionError(
                f"ranks own {sum(counts)} global indices in total, "
                f"expected {num_global}")

        offsets = np.concatenate([[0], np.cumsum(counts)[:-1]])
        is_contiguous = all(
            n == 0 or (run and start == index_base + offset)
            for (_, n, run, start, _), offset in zip(layout, offsets))

        ranges = [entry[4] for entry in layout if entry[4] is not None]

        gids.setflags(write=False)

        self.comm = comm
        self.rank = rank
        self.nranks = nranks
        self.num_global = num_global
        self.index_base = index_base
        self.counts = counts
        self.is_contiguous = is_contiguous
        self.min_global_index = min(lo for lo, _ in ranges) if ranges else None
        self.max_global_index = max(hi for _, hi in ranges) if ranges else None
        self._gids = gids

    # {{{ properties

    @property
    def num_local(self) -> int:
        """Number of global indices owned by this rank."""
        return len(self._gids)

    @property
    def my_global_indices(self) -> np.ndarray:
        """Read-only array of the global indices owned by this rank."""
        return self._gids

    @property
    def is_distributed(self) -> bool:
        """*True* if the map spreads its indices over more than one rank."""
        return sum(1 for count in self.counts if count) > 1

    # }}}

    # {{{ comparison

    def compare(self, other: "IndexMap") -> MapRelation:
        """Return the :class:`MapRelation` between *self* and *other*.

        Compatibility follows from the per-rank counts that every rank already
        knows. Telling identical maps from merely compatible ones needs an
        allreduce unless both maps are contiguous, so call this on all ranks.
        """
        if self is other:
            return MapRelation.IDENTICAL

        if (self.num_global != other.num_global
                or self.nranks != other.nranks
                or self.counts != other.counts):
            return MapRelation.INCOMPATIBLE

        if self.is_contiguous and other.is_contiguous:
            if self.index_base == other.index_base:
                return MapRelation.IDENTICAL
            return MapRelation.COMPATIBLE

        if self.is_contiguous != other.is_contiguous:
            return MapRelation.COMPATIBLE

        locally_same = bool(
            self.index_base == other.index_base
            and np.array_equal(self._gids, other._gids))
        if global_reduce(locally_same, "land", comm=self.comm):
            return MapRelation.IDENTICAL
        return MapRelation.COMPATIBLE

    def is_compatible(self, other: "IndexMap") -> bool:
        """Return *True* if vectors on *self* and *other* can be combined."""
        return self.compare(other).is_compatible

    def is_same_as(self, other: "IndexMap") -> bool:
        """Return *True* if *self* and *other* describe the same distribution."""
        return self.compare(other) is MapRelation.IDENTICAL

    # }}}

    # {{{ index lookup

    @memoize_method
    def _global_to_local_table(self):
        return {int(gid): lid for lid, gid in enumerate(self._gids)}

    def global_to_local(self, gid) -> Optional[int]:
        """Return the local offset of *gid*, or *None* if this rank does not own it."""
        gid = int(gid)
        if self.num_local == 0:
            return None
        if self.is_contiguous:
            lid = gid - int(self._gids[0])
            return lid if 0 <= lid < self.num_local else None
        return self._global_to_local_table().get(gid)

    def local_to_global(self, lid) -> int:
        """Return the global index at local offset *lid*."""
        lid = int(lid)
        if not 0 <= lid < self.num_local:
            raise IndexError(
                f"local index {lid} out of range for {self.num_local} local entries")
        return int(self._gids[lid])

    def is_node_global_element(self, gid) -> bool:
        """Return *True* if this rank owns *gid*."""
        return self.global_to_local(gid) is not None

    # }}}

    def describe(self) -> str:
        """Return a human-readable summary of the local part of the map."""
        kind = "contiguous" if self.is_contiguous else "noncontiguous"
        return (
            f"IndexMap ({kind})\n"
            f"  rank:            {self.rank} / {self.nranks}\n"
            f"  global elements: {self.num_global}\n"
            f"  index base:      {self.index_base}\n"
            f"  local elements:  {self.num_local}\n"
            f"  global indices:  {self._gids.tolist()}"
        )

    def __repr__(self):
        return (f"{type(self).__name__}(num_global={self.num_global}, "
                f"num_local={self.num_local}, rank={self.rank}, "
                f"contiguous={self.is_contiguous})")


def make_contiguous_map(num_global, index_base=0, comm=None) -> IndexMap:
    """Build a map that puts a consecutive run of indices on every rank.

    All ranks receive the same number of entries, up to one extra entry on
    the lowest ranks when *num_global* does not divide evenly.
    """
    rank, nranks = comm_rank_and_size(comm)
    offset, count = block_partition(int(num_global), nranks, rank)
    gids = np.arange(index_base + offset, index_base + offset + count,
                     dtype=global_index_dtype)
    return IndexMap(num_global, gids, index_base=index_base, comm=comm)


def make_cyclic_map(num_global, index_base=0, comm=None) -> IndexMap:
    """Build a map that deals indices out to ranks round-robin (1-D cyclic)."""
    rank, nranks = comm_rank_and_size(comm)
    gids = cyclic_indices(int(num_global), nranks, rank, index_base)
    return IndexMap(num_global, gids, index_base=index_base, comm=comm)


def check_example_maps(contig_map: IndexMap, cyclic_map: IndexMap) -> MapRelation:
    """Verify the layout properties of a contiguous and a cyclic map.

    The contiguous map must be contiguous and the two maps must be
    compatible. With more than one rank, the cyclic map must be neither
    contiguous nor identical to the contiguous map.

    Returns the :class:`MapRelation` of the two maps.

    Raises
    ------
    :class:`~distvec.exceptions.MapInvariantError`
        If one of the properties does not hold.
    """
    if not contig_map.is_contiguous:
        raise MapInvariantError("The supposedly contiguous map isn't contiguous.")

    relation = contig_map.compare(cyclic_map)

    if not relation.is_compatible:
        raise MapInvariantError(
            "The contiguous map should be compatible with the cyclic map, "
            "but it's not.")
    if contig_map.nranks > 1 and relation is MapRelation.IDENTICAL:
        raise MapInvariantError(
            "The contiguous map should not be the same as the cyclic map, "
            "but it is.")

    if contig_map.nranks > 1 and cyclic_map.is_contiguous:
        raise MapInvariantError("The cyclic map claims to be contiguous.")

    logger.debug("contiguous and cyclic maps are %s", relation.value)
    return relation

# vim: foldmethod=marker
