"""Drive the distributed vector example.

The example builds a contiguous and a cyclic map over ``elements_per_rank``
entries per rank, creates three vectors, combines them with
:meth:`~distvec.vector.DistributedVector.update` and reports their norms.

.. autoclass:: ExampleOptions
.. autoclass:: ExampleResult
.. autofunction:: resolve_example_options
.. autofunction:: run_vector_example
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
from dataclasses import dataclass, fields
import logging
from typing import Optional

from distvec.exceptions import ApplicationOptionsError
from distvec.io import (
    CommandResult, Reporter, make_version_banner, run_external_command)
from distvec.maps import (
    IndexMap, MapRelation, check_example_maps, make_contiguous_map,
    make_cyclic_map)
from distvec.simutil import comm_rank_and_size, configurate
from distvec.vector import DistributedVector


logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "echo helloooo!"


@dataclass(frozen=True)
class ExampleOptions:
    """Parameters of :func:`run_vector_example`.

    *command* is *None* to skip the external command.
    """

    elements_per_rank: int = 5
    index_base: int = 0
    seed: Optional[int] = None
    command: Optional[str] = DEFAULT_COMMAND
    alpha: float = 3.14159
    beta: float = 2.71828
    gamma: float = -10.0

    def __post_init__(self):
        # a cyclic map with fewer than 2 entries per rank is contiguous
        if self.elements_per_rank < 2:
            raise ApplicationOptionsError(
                "elements_per_rank must be at least 2, "
                f"got {self.elements_per_rank}")


@dataclass(frozen=True)
class ExampleResult:
    contig_map: IndexMap
    cyclic_map: IndexMap
    map_relation: MapRelation
    norm_y: float
    norm_x: float
    norm_z: float
    command_result: Optional[CommandResult] = None


_INTEGER_OPTIONS = ("elements_per_rank", "index_base", "seed")


def _as_integer(name, value):
    if isinstance(value, bool) or (
            isinstance(value, float) and not value.is_integer()):
        raise ApplicationOptionsError(
            f"{name} must be an integer, got {value!r}")
    return int(value)


def resolve_example_options(input_data=None, **overrides) -> ExampleOptions:
    """Merge an input file dictionary and command-line values into options.

    Values in *overrides* that are not *None* take precedence over
    *input_data*, which takes precedence over the defaults of
    :class:`ExampleOptions`.

    Raises
    ------
    :class:`~distvec.exceptions.ApplicationOptionsError`
        For unknown keys or values of the wrong type.
    """
    if input_data is None:
        input_data = {}
    if not isinstance(input_data, dict):
        raise ApplicationOptionsError(
            f"input data must be a mapping, got {type(input_data).__name__}")

    known = {f.name: f for f in fields(ExampleOptions)}
    unknown = (set(input_data) | set(overrides)) - set(known)
    if unknown:
        raise ApplicationOptionsError(
            f"unknown options: {', '.join(sorted(unknown))}")

    merged = dict(input_data)
    merged.update({k: v for k, v in overrides.items() if v is not None})

    defaults = ExampleOptions()
    values = {}
    try:
        for name in known:
            default = getattr(defaults, name)
            if name in _INTEGER_OPTIONS:
                # read raw so that non-integral values are not truncated
                value = configurate(name, merged)
                values[name] = default if value is None else _as_integer(name, value)
            elif name == "command":
                command = merged.get(name, default)
                if command is not None and not isinstance(command, str):
                    raise ApplicationOptionsError(
                        "command must be a string, "
                        f"got {type(command).__name__}")
                # an explicit null in the input file disables the command
                values[name] = command or None
            else:
                values[name] = configurate(name, merged, default)
    except (TypeError, ValueError) as e:
        raise ApplicationOptionsError(f"invalid option value: {e}") from e

    return ExampleOptions(**values)


def run_vector_example(comm, reporter: Reporter,
                       options: Optional[ExampleOptions] = None,
                       logmgr=None) -> ExampleResult:
    """Run the example on all ranks of *comm* and report on *reporter*.

    This is a collective routine. The external command, if any, runs on
    rank 0 only.
    """
    if options is None:
        options = ExampleOptions()

    rank, nranks = comm_rank_and_size(comm)

    if reporter.is_active:
        reporter.print(make_version_banner())
        reporter.print()
    reporter.print("This is a test")

    command_result = None
    if options.command and rank == 0:
        command_result = run_external_command(options.command, reporter)

    # {{{ maps

    num_global = options.elements_per_rank * nranks

    from pytools import ProcessLogger
    with ProcessLogger(logger, f"building maps over {num_global} elements"):
        contig_map = make_contiguous_map(num_global, options.index_base, comm)
        cyclic_map = make_cyclic_map(num_global, options.index_base, comm)
        relation = check_example_maps(contig_map, cyclic_map)

    logger.info(f"{rank=}: {num_global} global elements, "
                f"{contig_map.num_local} local, maps are {relation.value}")

    # }}}

    # {{{ vectors

    x = DistributedVector(contig_map)
    y = x.copy()
    z = DistributedVector(contig_map, zero_out=False)
    z.randomize(options.seed)

    x.put_scalar(1.0)

    # }}}

    if logmgr:
        from logpyle import IntervalTimer
        from distvec.logging_quantities import (
            logmgr_add_map_info, logmgr_add_run_parameters,
            logmgr_add_vector_norms)

        logmgr_add_run_parameters(logmgr, {
            "elements_per_rank": options.elements_per_rank,
            "seed": options.seed,
            "alpha": options.alpha,
            "beta": options.beta,
            "gamma": options.gamma})
        logmgr_add_map_info(logmgr, contig_map, "contig_map")
        logmgr_add_map_info(logmgr, cyclic_map, "cyclic_map")
        logmgr_add_vector_norms(logmgr, {"x": x, "y": y, "z": z})

        update_timer = IntervalTimer("t_update", "Time spent in vector updates")
        logmgr.add_quantity(update_timer)

        logmgr.tick_before()
        with update_timer.get_sub_timer():
            _update_vectors(x, y, z, options)
        logmgr.tick_after()
    else:
        _update_vectors(x, y, z, options)

    norm_y = y.norm2()
    reporter.print(f"Norm of y: {norm_y}")

    norm_x = x.norm2()
    reporter.print(f"Norm of x: {norm_x}")

    norm_z = z.norm2()
    reporter.print(f"Norm of z: {norm_z}")

    return ExampleResult(
        contig_map=contig_map, cyclic_map=cyclic_map, map_relation=relation,
        norm_y=norm_y, norm_x=norm_x, norm_z=norm_z,
        command_result=command_result)


def _update_vectors(x, y, z, options):
    alpha, beta, gamma = options.alpha, options.beta, options.gamma

    # x = beta*x + alpha*z
    x.update(alpha, z, beta)

    y.put_scalar(42.0)
    # y = gamma*y + alpha*x + beta*z
    y.update(alpha, x, beta, z, gamma)

# vim: foldmethod=marker
