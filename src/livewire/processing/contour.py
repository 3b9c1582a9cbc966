"""
Contour tracing through an ordered list of seed points.

Each pair of consecutive seeds is joined by the livewire path between them:
the search is anchored at the first seed of the pair and queried at the
second, and the segments are concatenated in seed order.
"""

import logging
from typing import List, Sequence

from tqdm import tqdm

from ..core.minimal_path import MinimalPathSearch
from ..exceptions import UnreachableQuery
from ..structures.polyline import PolyLinePath

logger = logging.getLogger(__name__)


def trace_segments(
    search: MinimalPathSearch,
    seeds: Sequence[Sequence[int]],
    closed: bool = False,
    show_progress: bool = False,
) -> List[PolyLinePath]:
    """
    Traces the livewire segment between every pair of consecutive seeds.

    Args:
        search: Configured search engine; its anchor is moved to each seed.
        seeds: Ordered seed indices.
        closed: If True, the last seed is also joined back to the first.
        show_progress: Display a progress bar over the segments.

    Returns:
        One PolyLinePath per segment, running from its first seed to its second.

    Raises:
        UnreachableQuery: If a seed cannot be reached from the previous one.
    """
    seeds = [tuple(int(c) for c in seed) for seed in seeds]
    if len(seeds) < 2:
        raise ValueError(f"At least two seeds are needed to trace a contour, got {len(seeds)}.")

    pairs = list(zip(seeds[:-1], seeds[1:]))
    if closed:
        pairs.append((seeds[-1], seeds[0]))

    segments = []
    for start, end in tqdm(pairs, desc="Tracing segments", disable=not show_progress):
        search.set_anchor(start)
        try:
            segment = search.evaluate_at_index(end)
        except UnreachableQuery:
            logger.warning(f"Seed {end} cannot be reached from seed {start}.")
            raise
        segments.append(segment.reversed())

    logger.info(f"Traced {len(segments)} contour segments through {len(seeds)} seeds.")
    return segments


def trace_contour(
    image,
    seeds: Sequence[Sequence[int]],
    closed: bool = False,
    show_progress: bool = False,
    **search_options,
) -> PolyLinePath:
    """
    Traces a livewire contour through a list of seeds.

    Args:
        image: Input image, a numpy array or an ImageGrid.
        seeds: Ordered seed indices.
        closed: If True, the contour returns to the first seed.
        show_progress: Display a progress bar over the segments.
        **search_options: Forwarded to MinimalPathSearch (mask, inside_value,
            face_connected, use_image_spacing, cost_model).

    Returns:
        A single PolyLinePath visiting the seeds in order. Junction vertices
        shared by consecutive segments appear once.
    """
    search = MinimalPathSearch(image, **search_options)
    segments = trace_segments(search, seeds, closed=closed, show_progress=show_progress)

    contour = PolyLinePath(search.image.ndim)
    for i, segment in enumerate(segments):
        vertices = segment.vertices if i == 0 else segment.vertices[1:]
        for vertex in vertices:
            contour.add_vertex(vertex)
    return contour
