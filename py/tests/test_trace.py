import os, sys
file_dir = os.path.dirname(__file__)
module_dir = os.path.join(file_dir, '..')
sys.path.append(module_dir)
import tufted_impl.meshes as meshes
from tufted_impl.halfedge import *
from tufted_impl.surface_point import *
from tufted_impl.trace import *
from tufted_impl.signpost import *
from tufted_impl.pipeline import *
from tufted_impl.cover import *
from tufted_impl.delaunay import *
import numpy as np
import pytest

def path_length(C, v3d, path):
    X = np.array([embedded_position(C, v3d, p) for p in path.points])
    return np.sum(np.linalg.norm(X[1:] - X[:-1], axis=1))

def validate_path(C, path):
    assert(len(path.faces) == len(path.points) - 1)
    # consecutive points lie in the face of their segment
    for i, f in enumerate(path.faces):
        for p in path.points[i:i+2]:
            b = in_face(C, p, f)
            assert(abs(np.sum(b) - 1) < 1e-9)
            assert(np.min(b) >= -1e-9)

def validate_endpoints(cover, C, T_C, h, path, trim_end=True):
    assert(path.points[0].kind == PointType.VERTEX)
    assert(cover.vtx_reindex[path.points[0].vertex] == cover.vtx_reindex[T_C.fr[h]])
    if trim_end:
        assert(path.points[-1].kind == PointType.VERTEX)
        assert(path.points[-1].vertex == T_C.to[h])

def test_trace_square_diagonal():
    v, f = meshes.generate_square()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    for h in cover_halfedges(cover, 0, 2):
        path = trace_halfedge(T, h)
        assert(len(path.points) == 2)
        assert(all(p.kind == PointType.VERTEX for p in path.points))
        assert(cover.vtx_reindex[path.points[0].vertex] == 0)
        assert(cover.vtx_reindex[path.points[1].vertex] == 2)
        validate_path(T.C_in, path)

def test_trace_unflipped_edges():
    v, f = meshes.generate_tet()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    for h in range(len(T.C.next_he)):
        path = trace_halfedge(T, h)
        assert(len(path.points) == 2)
        assert(path.points[0].vertex == T.C.fr[h])
        assert(path.points[1].vertex == T.C.to[h])

def test_trace_flipped_edge():
    v, f = meshes.generate_nondelaunay_quad()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    flipped = np.nonzero((cover.vtx_reindex[T.C.fr] == 1) & (cover.vtx_reindex[T.C.to] == 3))[0]
    assert(len(flipped) == 2)
    for h in flipped:
        path = trace_halfedge(T, h)
        validate_path(T.C_in, path)
        validate_endpoints(cover, T.C_in, T.C, h, path)
        # the new diagonal crosses the old one at its midpoint
        assert(len(path.points) == 3)
        p = path.points[1]
        assert(p.kind == PointType.EDGE)
        assert(sorted(cover.vtx_reindex[[T.C_in.fr[p.halfedge], T.C_in.to[p.halfedge]]]) == [0, 2])
        assert(abs(p.t - 0.5) < 1e-9)
        assert(abs(path_length(T.C_in, cover.v3d, path) - 2) < 1e-9)

def test_trace_without_trim():
    v, f = meshes.generate_nondelaunay_quad()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    h = np.nonzero((cover.vtx_reindex[T.C.fr] == 1) & (cover.vtx_reindex[T.C.to] == 3))[0][0]
    path = trace_halfedge(T, h, trim_end=False)
    end = embedded_position(T.C_in, cover.v3d, path.points[-1])
    assert(np.allclose(end, v[3], atol=1e-9))

def test_trace_input_halfedge():
    v, f = meshes.generate_nondelaunay_quad()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    for h in cover_halfedges(cover, 0, 2):
        path = trace_input_halfedge(T, h)
        validate_path(T.C, path)
        assert(path.points[0].vertex == T.C_in.fr[h])
        assert(path.points[-1].vertex == T.C_in.to[h])
        assert(len(path.points) == 3)
        p = path.points[1]
        assert(p.kind == PointType.EDGE)
        assert(sorted(cover.vtx_reindex[[T.C.fr[p.halfedge], T.C.to[p.halfedge]]]) == [1, 3])
        assert(abs(p.t - 0.5) < 1e-9)

def test_trace_partial_edge():
    v, f = meshes.generate_square()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    h = cover_halfedges(cover, 0, 1)[0]
    v0 = T.C.fr[h]
    path = trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum, v0, T.signpost[h], 0.25)
    assert(len(path.points) == 2)
    assert(path.points[1].kind == PointType.EDGE)
    assert(path.points[1].halfedge == h)
    assert(abs(path.points[1].t - 0.25) < 1e-12)

def test_trace_into_face():
    # from the corner (0,0) of the square into the triangle (0,1,2)
    v, f = meshes.generate_square()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    h = cover_halfedges(cover, 0, 1)[0]
    v0 = T.C.fr[h]
    # the face of h has a corner of pi/4 at v0
    path = trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum, v0, T.signpost[h] + np.pi/8, 0.5)
    assert(len(path.points) == 2)
    assert(path.points[1].kind == PointType.FACE)
    end = embedded_position(T.C, cover.v3d, path.points[1])
    assert(abs(np.linalg.norm(end - v[0]) - 0.5) < 1e-12)

def test_trace_errors():
    v, f = meshes.generate_square()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    with pytest.raises(TracingError):
        trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum, len(T.C.out) + 1, 0.0, 1.0)
    with pytest.raises(TracingError):
        trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum, 0, 0.0, 0.0)
    # too short for the target vertex
    h = cover_halfedges(cover, 0, 1)[0]
    with pytest.raises(TracingError):
        trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum, T.C.fr[h], T.signpost[h], 0.5,
                       target=T.C.to[h])

def test_surface_points():
    v, f = meshes.generate_tet()
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    C = T.C
    h = 0
    p = edge_point(h, 0.25)
    f0 = C.he2f[h]; f1 = C.he2f[C.opp[h]]
    assert(adjacent_faces(C, p) == sorted([f0, f1]))
    assert(shared_face(C, vertex_point(C.fr[h]), p) == min(f0, f1))
    # the same point seen from the opposite halfedge
    assert(np.allclose(embedded_position(C, cover.v3d, p),
                       embedded_position(C, cover.v3d, edge_point(C.opp[h], 0.75))))
    b = in_face(C, p, f0)
    assert(canonicalize(C, face_point(f0, b)) in [p, edge_point(C.opp[h], 0.75)])
    assert(canonicalize(C, face_point(f0, [1.0, 0.0, 0.0])) == vertex_point(C.fr[C.f2he[f0]]))
    with pytest.raises(ValueError):
        face_point(f0, [0.5, 0.6, 0.0])
    with pytest.raises(ValueError):
        edge_point(h, 1.5)

# length of the segment between two points of face f, from the barycentric displacement d:
# |d|^2 = -(d0 d1 l01^2 + d1 d2 l12^2 + d2 d0 l20^2)
def intrinsic_path_length(C, l, path):
    length = 0
    for i, f in enumerate(path.faces):
        hs = face_corners(C, f)
        d = in_face(C, path.points[i+1], f) - in_face(C, path.points[i], f)
        sq = -(d[0]*d[1]*l[hs[0]]**2 + d[1]*d[2]*l[hs[1]]**2 + d[2]*d[0]*l[hs[2]]**2)
        length += np.sqrt(max(sq, 0))
    return length

def validate_trace_all_edges(cover, T, embedded=True):
    n_points = []
    for h in range(len(T.C.next_he)):
        path = trace_halfedge(T, h)
        validate_path(T.C_in, path)
        validate_endpoints(cover, T.C_in, T.C, h, path)
        # the traced path is as long as the intrinsic edge
        assert(abs(intrinsic_path_length(T.C_in, T.l_in, path) - T.l[h]) < 1e-8)
        if embedded:
            assert(abs(path_length(T.C_in, cover.v3d, path) - T.l[h]) < 1e-8)
        n_points.append(len(path.points))
    return n_points

def test_trace_sheared_grid():
    # the Delaunay edges (0.3,0.8) of the lattice cross three grid edges
    v, f = meshes.generate_sheared_grid(10, 5)
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    n_points = validate_trace_all_edges(cover, T)
    assert(max(n_points) >= 5)

def test_trace_sheared_grid_bumpy():
    v, f = meshes.generate_sheared_grid(10, 5, bump=0.1)
    cover, T = generate_vertex_separated_tufted_cover(v, f)
    n_points = validate_trace_all_edges(cover, T)
    assert(max(n_points) >= 5)

def test_trace_sheared_torus():
    f, lengths = meshes.generate_sheared_torus(8, 4)
    edge_lengths = np.zeros(np.max(FV_to_edges(f).FE) + 1)
    edge_lengths[FV_to_edges(f).FE] = lengths
    cover = build_tufted_cover(None, f, edge_lengths=edge_lengths)
    T = build_signpost_triangulation(cover.C, cover.l)
    make_delaunay(T)
    n_points = validate_trace_all_edges(cover, T, embedded=False)
    assert(max(n_points) >= 5)
    # the input edges traced over the Delaunay triangulation end at their vertices too
    for h in range(len(T.C_in.next_he)):
        path = trace_input_halfedge(T, h)
        validate_path(T.C, path)
        assert(path.points[-1].vertex == T.C_in.to[h])
        assert(abs(intrinsic_path_length(T.C, T.l, path) - T.l_in[h]) < 1e-8)
