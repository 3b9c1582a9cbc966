import numpy as np
import pytest

from livewire.structures.polyline import PolyLinePath


@pytest.fixture
def l_path():
    return PolyLinePath(2, [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)])


def test_vertices(l_path):
    assert len(l_path) == 5
    assert l_path.vertices.shape == (5, 2)
    assert np.array_equal(l_path.start_point, (0, 0))
    assert np.array_equal(l_path.end_point, (2, 2))
    assert [tuple(v) for v in l_path] == [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]


def test_add_vertex_checks_dimension():
    path = PolyLinePath(3)
    path.add_vertex((1, 2, 3))
    with pytest.raises(ValueError):
        path.add_vertex((1, 2))
    with pytest.raises(ValueError):
        PolyLinePath(0)


def test_empty_path():
    path = PolyLinePath(2)
    assert len(path) == 0
    assert path.vertices.shape == (0, 2)
    assert path.length() == 0.0
    with pytest.raises(IndexError):
        path.start_point
    with pytest.raises(IndexError):
        path.evaluate(0.0)


def test_evaluate_interpolates(l_path):
    assert np.allclose(l_path.evaluate(0), (0, 0))
    assert np.allclose(l_path.evaluate(2.5), (0.5, 2.0))
    assert np.allclose(l_path.evaluate(4), (2, 2))
    assert np.allclose(l_path.evaluate(10), (2, 2))
    assert np.allclose(l_path.evaluate(-1), (0, 0))


def test_length(l_path):
    assert l_path.length() == pytest.approx(4.0)
    assert l_path.length(spacing=(2.0, 0.5)) == pytest.approx(2 * 2.0 + 2 * 0.5)

    diagonal = PolyLinePath(2, [(0, 0), (1, 1)])
    assert diagonal.length() == pytest.approx(np.sqrt(2))


def test_physical_points(l_path):
    points = l_path.to_physical(origin=(10.0, 20.0), spacing=(2.0, 3.0))
    assert np.allclose(points[-1], (14.0, 26.0))
    assert np.allclose(l_path.to_physical(), l_path.vertices)


def test_reversed(l_path):
    reversed_path = l_path.reversed()
    assert np.array_equal(reversed_path.vertices, l_path.vertices[::-1])
    assert np.array_equal(l_path.start_point, (0, 0))


def test_smoothed_keeps_end_points():
    vertices = [(0, i) for i in range(6)] + [(i, 5) for i in range(1, 6)]
    path = PolyLinePath(2, vertices)
    smooth = path.smoothed(smoothing_factor=0.5, num_points=12)

    assert len(smooth) == 12
    assert np.allclose(smooth.start_point, (0, 0))
    assert np.allclose(smooth.end_point, (5, 5))


def test_short_paths_are_not_smoothed():
    path = PolyLinePath(2, [(0, 0), (1, 1), (2, 1)])
    smooth = path.smoothed(num_points=50)
    assert np.array_equal(smooth.vertices, path.vertices)
    assert smooth is not path
