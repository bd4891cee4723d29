import logging
import numpy as np
import scipy.sparse as sp

from tufted_impl.halfedge import *
from tufted_impl.geomops import *

logger = logging.getLogger(__name__)


def cotan_laplacian(C, l, vtx_reindex, n_v, n_sheets=1):
    """
    Assemble the weak cotangent Laplacian of the triangulation (C, l) onto the vertices it covers.

    The matrix is positive semi-definite: the off-diagonal entry of an edge is minus half the sum
    of the cotangents of the two angles opposite the edge, and the rows sum to zero.

    param[in] Connectivity C: closed triangulation
    param[in] np.array l: per halfedge lengths
    param[in] np.array vtx_reindex: vertex of C -> output vertex
    param[in] int n_v: number of output vertices
    param[in] int n_sheets: number of copies of each output face in C, contributions are divided by it
    return scipy.sparse.csr_matrix: (n_v x n_v) Laplacian
    """
    corner = corner_angles(C, l)
    # weight of h from the angle opposite h, at the tail of prev_he[h]
    w = 0.5/np.tan(corner[C.prev_he])/n_sheets
    i = vtx_reindex[C.fr]
    j = vtx_reindex[C.to]
    I = np.concatenate([i, j, i, j])
    J = np.concatenate([j, i, i, j])
    V = np.concatenate([-w, -w, w, w])
    # both halfedges of an edge contribute, each with the angle of its own face
    return sp.coo_matrix((V, (I, J)), shape=(n_v, n_v)).tocsr()


def lumped_mass(C, l, vtx_reindex, n_v, n_sheets=1):
    """
    Diagonal lumped mass matrix, one third of each face area assigned to each of its corners.

    param[in] Connectivity C: closed triangulation
    param[in] np.array l: per halfedge lengths
    param[in] np.array vtx_reindex: vertex of C -> output vertex
    param[in] int n_v: number of output vertices
    param[in] int n_sheets: number of copies of each output face in C
    return scipy.sparse.csr_matrix: (n_v x n_v) diagonal mass matrix
    """
    area = face_areas(C, l)
    fh = face_halfedges(C)
    corner_mass = np.repeat(area/3, 3)/n_sheets
    M = np.bincount(vtx_reindex[C.fr[fh.flatten()]], weights=corner_mass, minlength=n_v)
    return sp.diags(M, format='csr')
