"""Test distributed vector operations."""

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

import numpy as np
import numpy.linalg as la
import pytest

from distvec.exceptions import IncompatibleMapError
from distvec.maps import IndexMap, make_contiguous_map
from distvec.vector import DistributedVector


def test_construction_and_copy():
    imap = make_contiguous_map(5)

    x = DistributedVector(imap)
    assert x.num_local == 5
    assert x.num_global == 5
    assert x.dtype == np.float64
    assert np.all(x.local_view() == 0)

    x.put_scalar(3.0)
    y = x.copy()
    assert y.imap is imap
    assert np.all(y.local_view() == 3.0)

    # deep copy
    x.put_scalar(1.0)
    assert np.all(y.local_view() == 3.0)

    z = DistributedVector(imap, zero_out=False)
    assert z.num_local == 5


def test_from_local_array():
    imap = make_contiguous_map(3)
    values = np.array([1.0, 2.0, 3.0])
    x = DistributedVector.from_local_array(imap, values)

    values[0] = 10
    assert x.local_view().tolist() == [1.0, 2.0, 3.0]

    with pytest.raises(ValueError):
        DistributedVector.from_local_array(imap, np.ones(4))


def test_from_local_array_converts_to_float():
    x = DistributedVector.from_local_array(make_contiguous_map(2), [1, 2])
    assert x.dtype == np.float64

    x.put_scalar(0.5)
    assert x.local_view().tolist() == [0.5, 0.5]

    ints = DistributedVector.from_local_array(
        make_contiguous_map(2), [1, 2], dtype=np.int64)
    assert ints.dtype == np.int64


@pytest.mark.parametrize("num_global", [1, 5, 17])
def test_norm_of_ones(num_global):
    x = DistributedVector(make_contiguous_map(num_global))
    x.put_scalar(1.0)

    assert x.norm2() == pytest.approx(np.sqrt(num_global))
    assert x.norm1() == pytest.approx(num_global)
    assert x.norm_inf() == 1.0
    assert x.mean_value() == pytest.approx(1.0)


def test_reductions_with_communicator(comm):
    imap = make_contiguous_map(2, comm=comm)
    x = DistributedVector.from_local_array(imap, [3.0, -4.0])
    y = DistributedVector.from_local_array(imap, [1.0, 2.0])

    assert x.norm2() == pytest.approx(5.0)
    assert x.norm1() == pytest.approx(7.0)
    assert x.norm_inf() == pytest.approx(4.0)
    assert x.dot(y) == pytest.approx(-5.0)
    assert x.mean_value() == pytest.approx(-0.5)


def test_norm2_of_large_and_small_entries():
    imap = make_contiguous_map(2)

    big = DistributedVector.from_local_array(imap, [3e200, -4e200])
    assert big.norm2() == pytest.approx(5e200)

    tiny = DistributedVector.from_local_array(imap, [3e-200, 4e-200])
    assert tiny.norm2() == pytest.approx(5e-200)

    big.replace_global_value(0, np.inf)
    assert big.norm2() == np.inf


def test_reductions_of_empty_vector():
    x = DistributedVector(make_contiguous_map(0))

    assert x.norm2() == 0.0
    assert x.norm_inf() == 0.0
    assert x.mean_value() == 0.0


def test_update_two_vectors():
    """Check ``x = beta*x + alpha*z`` entrywise."""
    alpha = 3.14159
    beta = 2.71828

    imap = make_contiguous_map(5)
    x = DistributedVector.from_local_array(imap, np.arange(5, dtype=np.float64))
    z = DistributedVector(imap, zero_out=False)
    z.randomize(seed=7)

    x_old = x.local_view().copy()
    x.update(alpha, z, beta)

    assert np.allclose(x.local_view(), beta*x_old + alpha*z.local_view())


def test_update_three_vectors():
    """Check ``y = gamma*y + alpha*x + beta*z`` entrywise."""
    alpha = 3.14159
    beta = 2.71828
    gamma = -10

    imap = make_contiguous_map(5)
    x = DistributedVector(imap)
    x.randomize(seed=1)
    z = DistributedVector(imap)
    z.randomize(seed=2)
    y = DistributedVector(imap)
    y.put_scalar(42)

    y.update(alpha, x, beta, z, gamma)

    assert np.allclose(
        y.local_view(),
        gamma*42 + alpha*x.local_view() + beta*z.local_view())


def test_update_with_zero_coefficient_discards_old_values():
    imap = make_contiguous_map(3)
    x = DistributedVector(imap)
    x.put_scalar(np.nan)
    z = DistributedVector(imap)
    z.put_scalar(2.0)

    x.update(0.5, z, 0.0)
    assert np.all(x.local_view() == 1.0)

    x.put_scalar(np.inf)
    x.update(1.0, z, 1.0, z, 0)
    assert np.all(x.local_view() == 4.0)


def test_update_with_itself():
    x = DistributedVector.from_local_array(make_contiguous_map(3), [1.0, 2.0, 3.0])

    x.update(1.0, x, 1.0)
    assert x.local_view().tolist() == [2.0, 4.0, 6.0]

    x.update(1.0, x, 1.0, x, -1.0)
    assert x.local_view().tolist() == [2.0, 4.0, 6.0]


def test_update_argument_errors():
    imap = make_contiguous_map(3)
    x = DistributedVector(imap)
    z = DistributedVector(imap)

    with pytest.raises(TypeError):
        x.update(1.0, z, 1.0, gamma=1.0)
    with pytest.raises(TypeError):
        x.update(1.0, z, 1.0, z)


def test_update_on_compatible_maps():
    """Vectors on compatible, but not identical, maps can be combined."""
    x = DistributedVector(make_contiguous_map(4))
    x.put_scalar(1.0)
    z = DistributedVector.from_local_array(IndexMap(4, [3, 2, 1, 0]),
                                           [1.0, 2.0, 3.0, 4.0])

    x.update(2.0, z, 1.0)
    assert x.local_view().tolist() == [3.0, 5.0, 7.0, 9.0]


def test_incompatible_maps():
    x = DistributedVector(make_contiguous_map(4))
    z = DistributedVector(make_contiguous_map(5))

    with pytest.raises(IncompatibleMapError) as exc_info:
        x.update(1.0, z, 1.0)
    assert not exc_info.value.relation.is_compatible

    with pytest.raises(IncompatibleMapError):
        x.update(1.0, x, 1.0, z, 1.0)

    with pytest.raises(IncompatibleMapError):
        x.dot(z)


def test_randomize():
    imap = make_contiguous_map(100)

    x = DistributedVector(imap, zero_out=False)
    x.randomize(seed=1234)
    values = x.local_view()
    assert np.all(values >= -1.0)
    assert np.all(values < 1.0)

    y = DistributedVector(imap)
    y.randomize(seed=1234)
    assert np.array_equal(values, y.local_view())

    y.randomize(seed=4321)
    assert not np.array_equal(values, y.local_view())

    y.randomize()
    assert not np.array_equal(values, y.local_view())


def test_scale_and_dot():
    imap = make_contiguous_map(4)
    x = DistributedVector.from_local_array(imap, [1.0, 2.0, 3.0, 4.0])

    x.scale(-2)
    assert x.local_view().tolist() == [-2.0, -4.0, -6.0, -8.0]
    assert x.dot(x) == pytest.approx(la.norm(x.local_view())**2)


def test_global_value_access():
    imap = IndexMap(4, [2, 0, 3, 1])
    x = DistributedVector(imap)

    x.replace_global_value(3, 5.0)
    x.sum_into_global_value(3, 1.5)
    x.sum_into_global_value(0, -1.0)

    assert x.local_view().tolist() == [0.0, -1.0, 6.5, 0.0]

    with pytest.raises(KeyError):
        x.replace_global_value(4, 1.0)


def test_local_view_is_writable():
    x = DistributedVector(make_contiguous_map(3))
    x.local_view()[1] = 7.0

    assert x.norm2() == pytest.approx(7.0)


@pytest.mark.parametrize("index_base", [0, 1])
def test_gather_orders_by_global_index(index_base):
    gids = [index_base + gid for gid in [2, 0, 3, 1]]
    x = DistributedVector.from_local_array(
        IndexMap(4, gids, index_base=index_base), [20.0, 0.0, 30.0, 10.0])

    assert x.gather().tolist() == [0.0, 10.0, 20.0, 30.0]


def test_gather_with_communicator(comm):
    x = DistributedVector.from_local_array(
        IndexMap(3, [1, 2, 0], comm=comm), [1.0, 2.0, 0.0])

    assert x.gather(root=0).tolist() == [0.0, 1.0, 2.0]


if __name__ == "__main__":
    import sys
    if len(sys.argv) > 1:
        exec(sys.argv[1])
    else:
        from pytest import main
        main([__file__])
