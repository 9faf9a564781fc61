"""Demonstrate building distributed vectors on contiguous and cyclic maps."""

__copyright__ = "Copyright (C) 2026 University of Illinois Board of Trustees"

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

from distvec.driver import (
    DEFAULT_COMMAND, resolve_example_options, run_vector_example)
from distvec.io import Reporter, read_and_distribute_yaml_data
from distvec.logging_quantities import initialize_logmgr
from distvec.mpi import enable_rank_labeled_print, mpi_entry_point


@mpi_entry_point
def main(input_file=None, seed=None, elements_per_rank=None,
         command=None, use_logmgr=False, log_filename="vector-mpi.sqlite",
         label_ranks=False):
    """Drive the example."""
    if label_ranks:
        enable_rank_labeled_print()

    from mpi4py import MPI
    comm = MPI.COMM_WORLD
    rank = comm.Get_rank()

    reporter = Reporter.for_rank(rank)

    input_data = None
    if input_file:
        input_data = read_and_distribute_yaml_data(comm, input_file)

    options = resolve_example_options(
        input_data, seed=seed, elements_per_rank=elements_per_rank,
        command=command)

    logmgr = initialize_logmgr(use_logmgr,
        filename=log_filename, mode="wu", mpi_comm=comm)

    try:
        run_vector_example(comm, reporter, options, logmgr=logmgr)
    finally:
        if logmgr:
            logmgr.close()


if __name__ == "__main__":
    logging.basicConfig(format="%(message)s", level=logging.INFO)

    import argparse
    parser = argparse.ArgumentParser(
        description="Distributed vectors on contiguous and cyclic maps")
    parser.add_argument("-i", "--input", type=str, dest="input_file",
        help="YAML file with example options")
    parser.add_argument("--seed", type=int,
        help="seed for the random vector (default: unseeded)")
    parser.add_argument("--elements-per-rank", type=int,
        help="number of vector entries on each rank (default: 5)")
    parser.add_argument("--command", type=str,
        help=f"external command whose output is reported "
             f"(default: '{DEFAULT_COMMAND}')")
    parser.add_argument("--no-command", action="store_true",
        help="do not run an external command")
    parser.add_argument("--log", action="store_true",
        help="turn on logpyle time series logging")
    parser.add_argument("--log-filename", type=str, default="vector-mpi.sqlite",
        help="logpyle output file")
    parser.add_argument("--label-ranks", action="store_true",
        help="prefix printed output with the MPI rank")
    args = parser.parse_args()

    main(input_file=args.input_file, seed=args.seed,
         elements_per_rank=args.elements_per_rank,
         command="" if args.no_command else args.command,
         use_logmgr=args.log, log_filename=args.log_filename,
         label_ranks=args.label_ranks)

# vim: foldmethod=marker
