"""I/O - related functions and utilities.

.. autoclass:: Reporter
.. autoclass:: CommandResult
.. autofunction:: run_external_command
.. autofunction:: make_version_banner
.. autofunction:: read_and_distribute_yaml_data
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
from dataclasses import dataclass
import logging
import sys
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


class Reporter:
    """Destination for the human-readable output of a run.

    Pick one per process at startup with :meth:`for_rank` and pass it to
    whatever produces output. A reporter without a stream discards everything
    written to it.

    .. automethod:: for_rank
    .. automethod:: print
    .. automethod:: write
    """

    def __init__(self, stream=None):
        self.stream = stream

    @classmethod
    def for_rank(cls, rank: int, stream=None, root: int = 0) -> "Reporter":
        """Return a reporter that writes to *stream* on *root* only.

        *stream* defaults to :data:`sys.stdout`.
        """
        if rank != root:
            return cls(None)
        return cls(sys.stdout if stream is None else stream)

    @property
    def is_active(self) -> bool:
        return self.stream is not None

    def write(self, text: str) -> None:
        """Write *text* as-is."""
        if self.stream is None:
            return
        self.stream.write(text)

    def print(self, *args, sep=" ", end="\n") -> None:
        """Like :func:`print`, writing to the reporter's stream."""
        if self.stream is None:
            return
        print(*args, sep=sep, end=end, file=self.stream)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of :func:`run_external_command`.

    .. attribute:: argv
    .. attribute:: returncode

        The exit status, or *None* if the command could not be started.

    .. attribute:: stdout
    .. attribute:: stderr
    """

    argv: Tuple[str, ...]
    returncode: Optional[int]
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def run_external_command(command, reporter: Optional[Reporter] = None,
                         timeout: Optional[float] = None) -> CommandResult:
    """Run *command* without a shell and capture its output.

    *command* is either a string, split with :func:`shlex.split`, or a
    sequence of arguments. The captured standard output is written to
    *reporter*. A failure to start the command, a timeout, or a non-zero
    exit status produces a warning and is recorded in the returned
    :class:`CommandResult`; none of them raises.
    """
    import shlex
    import subprocess
    from warnings import warn
    from pytools import ProcessLogger

    if isinstance(command, str):
        argv = tuple(shlex.split(command))
    else:
        argv = tuple(str(arg) for arg in command)

    if not argv:
        raise ValueError("empty command")

    cmdline = shlex.join(argv)

    try:
        with ProcessLogger(logger, f"running '{cmdline}'"):
            proc = subprocess.run(argv, capture_output=True, text=True,
                                  timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        warn(f"Could not run '{cmdline}': {e}")
        return CommandResult(argv=argv, returncode=None, stdout="", stderr=str(e))

    result = CommandResult(argv=argv, returncode=proc.returncode,
                           stdout=proc.stdout, stderr=proc.stderr)

    if reporter is not None and result.stdout:
        reporter.write(result.stdout)

    if not result.succeeded:
        warn(f"'{cmdline}' exited with status {result.returncode}: "
             f"{result.stderr.strip()}")

    return result


def make_version_banner() -> str:
    """Return the versions of distvec, numpy, mpi4py and the MPI library."""
    import mpi4py
    import numpy as np
    from mpi4py import MPI

    from distvec.version import VERSION_TEXT

    mpi_ver = MPI.Get_version()
    mpi_lib = MPI.Get_library_version().strip().splitlines()[0]
    return (
        f"distvec {VERSION_TEXT}\n"
        f"numpy {np.__version__}\n"
        f"mpi4py {mpi4py.__version__} "
        f"(MPI v{mpi_ver[0]}.{mpi_ver[1]}: {mpi_lib})"
    )


def read_and_distribute_yaml_data(mpi_comm, file_path):
    """Read a YAML file on one rank, broadcast result to world."""
    import yaml
    rank = 0 if mpi_comm is None else mpi_comm.Get_rank()
    if rank == 0:
        with open(file_path) as f:
            input_data = yaml.safe_load(f)
    else:
        input_data = None
    if mpi_comm is not None:
        input_data = mpi_comm.bcast(input_data, root=0)
    return input_data
