import os, sys
file_dir = os.path.dirname(__file__)
module_dir = os.path.join(file_dir, '..')
sys.path.append(module_dir)
import tufted_impl.meshes as meshes
from tufted_impl.halfedge import *
from tufted_impl.cover import *
import numpy as np
import pytest

def validate_cover(v, f):
    cover = build_tufted_cover(v, f)
    C = cover.C
    assert(is_valid_connectivity(C))
    # every cover edge has two distinct faces, and both halfedges have the same length
    assert((C.opp[C.opp] == np.arange(len(C.opp))).all())
    assert((C.opp != np.arange(len(C.opp))).all())
    assert(np.allclose(cover.l, cover.l[C.opp]))
    # lengths are the lengths of the embedded edges
    assert(np.allclose(cover.l, np.linalg.norm(cover.v3d[C.to] - cover.v3d[C.fr], axis=1)))
    assert(np.allclose(cover.v3d, v[cover.vtx_reindex]))
    # every input face has n_sheets copies
    assert((np.bincount(cover.he2orig_face) == 3*cover.n_sheets).all())
    return cover

def test_closed_manifold_is_unchanged():
    v, f = meshes.generate_tet()
    cover = validate_cover(v, f)
    assert(cover.n_sheets == 1)
    assert(len(cover.C.next_he) == 3*len(f))
    assert(len(cover.C.out) == len(v))
    # halfedge 3*i+k runs from f[i,k] to f[i,(k+1)%3]
    tail = cover.vtx_reindex[cover.C.fr]
    head = cover.vtx_reindex[cover.C.to]
    assert((tail == f.flatten()).all())
    assert((head == f[:,[1,2,0]].flatten()).all())
    assert(np.allclose(cover.l, np.linalg.norm(v[head] - v[tail], axis=1)))
    assert(euler_characteristic_from_connectivity(cover.C) == [2])

def test_single_triangle_is_doubled():
    v, f = meshes.generate_tri()
    cover = validate_cover(v, f)
    assert(cover.n_sheets == 2)
    assert(len(cover.C.f2he) == 2)
    assert(len(cover.C.out) == 3)
    # boundary edges glue the two copies of the face
    C = cover.C
    assert((C.he2f[C.opp] != C.he2f).all())
    assert(euler_characteristic_from_connectivity(C) == [2])

def test_nonmanifold_edge():
    v, f = meshes.generate_fin(3)
    cover = validate_cover(v, f)
    C = cover.C
    assert(cover.n_sheets == 2)
    assert(len(C.f2he) == 6)
    assert(len(C.next_he)//2 == 9)
    # the shared edge yields one cover edge per fin
    assert(len(cover_halfedges(cover, 0, 1)) == 3)
    assert(len(cover_halfedges(cover, 1, 0)) == 3)
    assert(len(C.out) == 5)
    assert(euler_characteristic_from_connectivity(C) == [2])

def test_many_fins():
    v, f = meshes.generate_fin(5)
    cover = validate_cover(v, f)
    assert(len(cover_halfedges(cover, 0, 1)) == 5)

def test_nonmanifold_vertex_is_split():
    v, f = meshes.generate_bowtie_tets()
    cover = validate_cover(v, f)
    assert(cover.n_sheets == 1)
    assert(len(cover.C.out) == 8)
    assert(len(cover_vertices(cover, 0)) == 2)
    assert(sorted(euler_characteristic_from_connectivity(cover.C)) == [2, 2])

def test_open_quad():
    v, f = meshes.generate_nondelaunay_quad()
    cover = validate_cover(v, f)
    assert(cover.n_sheets == 2)
    # the interior diagonal is glued between the two faces, once per orientation
    assert(len(cover_halfedges(cover, 0, 2)) == 2)
    assert(len(cover.C.out) == 4)

def test_lengths_without_embedding():
    f = np.array([[0,1,2]], dtype=int)
    # edges in sorted order (0,1), (0,2), (1,2)
    cover = build_tufted_cover(None, f, edge_lengths=[3.0, 4.0, 5.0])
    assert(cover.v3d is None)
    assert(sorted(np.unique(cover.l)) == [3.0, 4.0, 5.0])
    with pytest.raises(ValueError):
        build_tufted_cover(None, f)
    with pytest.raises(ValueError):
        build_tufted_cover(None, f, edge_lengths=[1.0, 1.0])

def test_invalid_faces():
    v, _ = meshes.generate_tet()
    with pytest.raises(ValueError):
        build_tufted_cover(v, np.array([[0,1,1]]))
    with pytest.raises(ValueError):
        build_tufted_cover(v, np.array([[0,1,7]]))
    with pytest.raises(ValueError):
        build_tufted_cover(v, np.array([[0,1,2,3]]))

def test_input_not_modified():
    v, f = meshes.generate_fin(3)
    v_copy = v.copy(); f_copy = f.copy()
    cover = build_tufted_cover(v, f)
    cover.v3d[:] = 0
    assert((v == v_copy).all())
    assert((f == f_copy).all())
