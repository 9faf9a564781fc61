import os

# Global FULL_SUITE flag to control which parameter sets are used
FULL_SUITE = None

QUICK_NRANKS = [2]
FULL_NRANKS = [2, 3, 4]


def pytest_addoption(parser):
    """Add the --full-suite command-line option for pytest."""
    parser.addoption(
        "--full-suite", action="store_true", default=False, help="Run the full test suite"
    )


def pytest_configure(config):
    """Set the FULL_SUITE flag based on --full-suite option or environment variable."""
    global FULL_SUITE
    FULL_SUITE = config.getoption("--full-suite") or os.getenv("FULL_TESTS") == "1"


def pytest_generate_tests(metafunc):
    """Parametrize the *nranks* argument of mpiexec-based tests."""
    if "nranks" in metafunc.fixturenames and "run_mpi" in metafunc.fixturenames:
        metafunc.parametrize("nranks", FULL_NRANKS if FULL_SUITE else QUICK_NRANKS)

