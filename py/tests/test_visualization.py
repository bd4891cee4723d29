import os, sys
file_dir = os.path.dirname(__file__)
module_dir = os.path.join(file_dir, '..')
sys.path.append(module_dir)
import tufted_impl.meshes as meshes
from tufted_impl.halfedge import *
from tufted_impl.pipeline import *
from viz_impl.bubble import *
from viz_impl.visualization import *
import numpy as np
import pytest

def validate_polylines(T, cover, polylines):
    edges = edge_halfedges(T.C)
    assert(len(polylines) == len(edges))
    for h, p in zip(edges, polylines):
        assert(p.shape[1] == 3)
        assert(np.isfinite(p).all())
        # the polyline joins the positions of the edge endpoints
        assert(np.allclose(p[0], cover.v3d[T.C.fr[h]], atol=1e-12))
        assert(np.allclose(p[-1], cover.v3d[T.C.to[h]], atol=1e-12))

def test_visualization_params():
    params = VisualizationParams()
    assert(params.subdiv_level == 3)
    assert(params.bubble_scale == 0.2)
    assert(params.points_per_edge == 10)
    VisualizationParams(subdiv_level=0, bubble_scale=0.5, points_per_edge=0)
    with pytest.raises(ValueError):
        VisualizationParams(subdiv_level=-1)
    with pytest.raises(ValueError):
        VisualizationParams(bubble_scale=0.6)
    with pytest.raises(ValueError):
        VisualizationParams(bubble_scale=-0.1)
    with pytest.raises(ValueError):
        VisualizationParams(points_per_edge=-2)

def test_trace_intrinsic_edges_unflipped():
    # no flips: every edge is a single segment with the samples of one face
    v, f = meshes.generate_square()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    bubble = BubbleOffset(cover.C, cover.v3d, 0.2)
    polylines = trace_intrinsic_edges(T, bubble, 10)
    assert(len(polylines) == 6)
    for p in polylines:
        assert(len(p) == 12)
    validate_polylines(T, cover, polylines)

def test_trace_intrinsic_edges_flipped():
    v, f = meshes.generate_nondelaunay_quad()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    bubble = BubbleOffset(cover.C, cover.v3d, 0.2)
    polylines = trace_intrinsic_edges(T, bubble, 10)
    validate_polylines(T, cover, polylines)
    # the two flipped diagonals cross two faces each
    lengths = sorted(len(p) for p in polylines)
    assert(lengths == [12]*(len(polylines) - 2) + [23, 23])
    # without bubble the flipped diagonals are straight
    flat = BubbleOffset(cover.C, cover.v3d, 0.0)
    for p in trace_intrinsic_edges(T, flat, 3):
        if len(p) == 9:
            d = p[-1] - p[0]
            offsets = np.cross(p - p[0], d)
            assert(np.allclose(offsets, 0, atol=1e-9))

def test_polylines_to_curve_network():
    polylines = [np.zeros((3,3)), np.ones((2,3))]
    nodes, edges = polylines_to_curve_network(polylines)
    assert(nodes.shape == (5,3))
    assert((edges == np.array([[0,1],[1,2],[3,4]])).all())
    nodes, edges = polylines_to_curve_network([])
    assert(nodes.shape == (0,3))
    assert(edges.shape == (0,2))

def test_generate_visualization():
    v, f = meshes.generate_tet()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    l = T.l.copy()
    params = VisualizationParams(subdiv_level=1, bubble_scale=0.1, points_per_edge=2)
    V, F, polylines = generate_visualization(T, cover, params)
    n_f = len(cover.C.f2he)
    assert(V.shape == (6*n_f, 3))
    assert(F.shape == (4*n_f, 3))
    assert(len(polylines) == 6)
    validate_polylines(T, cover, polylines)
    # the triangulation is not modified
    assert((T.l == l).all())
