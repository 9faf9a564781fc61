"""Support for time series logging."""

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

__doc__ = """
.. autoclass:: VectorNorm
.. autoclass:: PythonMemoryUsage
.. autofunction:: initialize_logmgr
.. autofunction:: logmgr_add_run_parameters
.. autofunction:: logmgr_add_map_info
.. autofunction:: logmgr_add_vector_norms
"""

import logging
from typing import Any, Dict, Optional

from logpyle import (LogManager, PostLogQuantity, add_run_info,
    add_general_quantities)

from distvec.maps import IndexMap
from distvec.vector import DistributedVector


logger = logging.getLogger(__name__)


def initialize_logmgr(enable_logmgr: bool,
                      filename: Optional[str] = None, mode: str = "wu",
                      mpi_comm=None) -> Optional[LogManager]:
    """Create and initialize a distvec-specific :class:`logpyle.LogManager`."""
    if not enable_logmgr:
        return None

    logmgr = LogManager(filename=filename, mode=mode, mpi_comm=mpi_comm)
    logmgr.enable_save_on_sigterm()

    add_run_info(logmgr)
    add_general_quantities(logmgr)

    try:
        logmgr.add_quantity(PythonMemoryUsage())
    except ImportError:
        from warnings import warn
        warn("psutil module not found, not tracking memory consumption."
             "Install it with 'pip install psutil'")

    return logmgr


def logmgr_add_run_parameters(logmgr: LogManager,
                              run_params: Dict[str, Any]) -> None:
    """Store user-defined run parameters as constants of the log."""
    for name, value in run_params.items():
        logmgr.set_constant(name, value)


def logmgr_add_map_info(logmgr: LogManager, imap: IndexMap, prefix: str) -> None:
    """Store the layout of *imap* as constants named ``<prefix>_*``."""
    logmgr.set_constant(f"{prefix}_num_global", imap.num_global)
    logmgr.set_constant(f"{prefix}_index_base", imap.index_base)
    logmgr.set_constant(f"{prefix}_counts", list(imap.counts))
    logmgr.set_constant(f"{prefix}_is_contiguous", imap.is_contiguous)


def logmgr_add_vector_norms(logmgr: LogManager,
                            vectors: Dict[str, DistributedVector]) -> None:
    """Log the 2-norm of each vector in *vectors* under ``norm2_<name>``."""
    for vec_name, vec in vectors.items():
        logmgr.add_quantity(VectorNorm(vec, vec_name))


class VectorNorm(PostLogQuantity):
    """Logging support for the Euclidean norm of a :class:`DistributedVector`.

    The norm is a collective reduction, so the log manager must tick on all
    ranks.
    """

    def __init__(self, vec: DistributedVector, vec_name: str,
                 name: Optional[str] = None) -> None:
        if name is None:
            name = f"norm2_{vec_name}"

        super().__init__(name, "1", description=f"2-norm of {vec_name}")
        self.vec = vec

    @property
    def default_aggregator(self):
        """Rank aggregator to use."""
        return max

    def __call__(self) -> float:
        """Return the current norm of the vector."""
        return self.vec.norm2()


class PythonMemoryUsage(PostLogQuantity):
    """Logging support for Python memory usage (RSS, host).

    Uses :mod:`psutil` to track memory usage. Virtually no overhead.
    """

    def __init__(self, name: Optional[str] = None):

        if name is None:
            name = "memory_usage_python"

        super().__init__(name, "MByte", description="Memory usage (RSS, host)")

        import psutil  # pylint: disable=import-error
        self.process = psutil.Process()

    def __call__(self) -> float:
        """Return the memory usage in MByte."""
        return self.process.memory_info()[0] / 1024 / 1024
