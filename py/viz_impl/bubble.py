# Bubble offset of a triangulated surface
#
# A point with barycentric coordinates b in face f is displaced along the face normal by
#
#   s * mean_edge_length(f) * sqrt(27 * b0 * b1 * b2)
#
# The bump is 1 at the face center and vanishes on edges and vertices, so the offset surface stays
# attached to the flat mesh along its edges and every face is inflated into a rounded cap.
# Only the face geometry and the barycentric coordinates enter, so queries are deterministic.

import igl
import numpy as np

from tufted_impl.halfedge import *
from tufted_impl.surface_point import *

def bubble_bump(B):
    B = np.maximum(np.asarray(B, dtype=float), 0.0)
    return np.sqrt(27*np.prod(B, axis=-1))

class BubbleOffset:
    """
    Offset map for surface points of the mesh C with vertex positions v3d.
    """

    def __init__(self, C, v3d, relative_scale):
        if relative_scale < 0:
            raise ValueError("bubble scale must be non-negative, got {}".format(relative_scale))
        self.C = C
        self.v3d = np.asarray(v3d, dtype=float)
        self.relative_scale = relative_scale
        # corner vertex positions in the corner order of the faces
        self.F = C.fr[face_halfedges(C)]
        self.corners = self.v3d[self.F]
        self.normals = igl.per_face_normals(self.v3d, self.F, np.array([0.0, 0.0, 0.0]))
        edge_vec = self.corners[:,[1,2,0]] - self.corners
        self.mean_edge_length = np.mean(np.linalg.norm(edge_vec, axis=2), axis=1)

    def query_face(self, f, B):
        """
        Offset positions of barycentric points in faces.

        param[in] f: face index, or array of face indices, one per row of B
        param[in] np.array B: (3) or (k x 3) barycentric coordinates in the corner order of the faces
        return np.array: (3) or (k x 3) positions
        """
        B = np.asarray(B, dtype=float)
        x = np.einsum('...k,...kd->...d', B, self.corners[f])
        height = np.asarray(self.relative_scale*self.mean_edge_length[f]*bubble_bump(B))
        return x + height[...,None]*self.normals[f]

    def query_point(self, p):
        if p.kind == PointType.FACE:
            return self.query_face(p.face, np.array(p.bary))
        return embedded_position(self.C, self.v3d, p)


# barycentric grid with n segments per side, and its triangles, oriented like the face
def barycentric_grid(n):
    index = {}
    B = []
    for i in range(n+1):
        for j in range(n+1-i):
            index[(i,j)] = len(B)
            B.append([(n-i-j)/n, i/n, j/n])
    T = []
    for i in range(n):
        for j in range(n-i):
            T.append([index[(i,j)], index[(i+1,j)], index[(i,j+1)]])
            if i + j < n - 1:
                T.append([index[(i+1,j)], index[(i+1,j+1)], index[(i,j+1)]])
    return np.array(B), np.array(T, dtype=int)

def subdivide_rounded(C, v3d, level, scale):
    """
    Rounded triangle soup of the mesh C: every face is sampled on a barycentric grid with 2**level
    segments per side and the samples are moved by the bubble offset.

    param[in] Connectivity C: mesh
    param[in] np.array v3d: vertex positions of C
    param[in] int level: subdivision level >= 0
    param[in] float scale: relative bubble scale
    return np.array V: (n_f*(n+1)*(n+2)/2 x 3) positions, n = 2**level
    return np.array F: (n_f*n*n x 3) triangles
    """
    if level < 0:
        raise ValueError("subdivision level must be non-negative, got {}".format(level))
    bubble = BubbleOffset(C, v3d, scale)
    B, T = barycentric_grid(2**level)
    n_f = len(C.f2he)
    faces = np.repeat(np.arange(n_f), len(B))
    V = bubble.query_face(faces, np.tile(B, (n_f, 1)))
    F = (T[None,:,:] + len(B)*np.arange(n_f)[:,None,None]).reshape(-1, 3)
    return V, F
