import numpy as np
import pytest

from livewire.core.topology import NeighborTopology, neighbor_offsets


@pytest.mark.parametrize("ndim", [1, 2, 3, 4])
def test_offset_counts(ndim):
    face = neighbor_offsets(ndim, face_connected=True)
    full = neighbor_offsets(ndim, face_connected=False)

    assert len(face) == 2 * ndim
    assert len(full) == 3**ndim - 1
    assert len(set(full)) == len(full)
    assert set(face) <= set(full)
    assert all(sum(map(abs, offset)) == 1 for offset in face)
    assert (0,) * ndim not in full


def test_invalid_dimension():
    with pytest.raises(ValueError):
        neighbor_offsets(0, face_connected=True)


def test_neighbors_respect_bounds():
    topology = NeighborTopology((3, 4), face_connected=False)
    assert len(list(topology.neighbors((1, 1)))) == 8
    assert len(list(topology.neighbors((0, 0)))) == 3

    topology = NeighborTopology((3, 4), face_connected=True)
    corner = dict(topology.neighbors((2, 3)))
    assert set(corner.values()) == {(1, 3), (2, 2)}
    for offset, neighbor in corner.items():
        assert tuple(np.add((2, 3), offset)) == neighbor


def test_neighbors_respect_mask():
    mask = np.array([[1, 0, 1], [1, 1, 1], [0, 1, 1]])
    topology = NeighborTopology(mask.shape, mask=mask, inside_value=1, face_connected=False)

    neighbors = {neighbor for _, neighbor in topology.neighbors((1, 1))}
    assert neighbors == {(0, 0), (0, 2), (1, 0), (1, 2), (2, 1), (2, 2)}
    assert not topology.contains((0, 1))
    assert topology.contains((1, 1))
    assert not topology.contains((3, 1))


def test_mask_shape_must_match():
    with pytest.raises(ValueError):
        NeighborTopology((3, 3), mask=np.ones((2, 3)))
