# Points on a triangle mesh given by Connectivity C
#
# A SurfacePoint is one of
#   VERTEX:  a vertex id
#   EDGE:    a halfedge h and a parameter t in [0,1], the point (1-t)*fr[h] + t*to[h]
#   FACE:    a face f and barycentric coordinates in the corner order of the face,
#            i.e. for the corners fr[f2he[f]], fr[next_he[f2he[f]]], fr[next_he[next_he[f2he[f]]]]
#
# Consumers either handle all three kinds or convert to face coordinates with in_face.

import numpy as np
from enum import Enum
from dataclasses import dataclass

BARY_EPS = 1e-8

class PointType(Enum):
    VERTEX = 0
    EDGE = 1
    FACE = 2

@dataclass(frozen=True)
class SurfacePoint:
    kind:     PointType
    vertex:   int = -1
    halfedge: int = -1
    t:        float = 0.0
    face:     int = -1
    bary:     tuple = ()

def vertex_point(v):
    return SurfacePoint(PointType.VERTEX, vertex=int(v))

def edge_point(h, t):
    if not (-BARY_EPS <= t <= 1 + BARY_EPS):
        raise ValueError("edge parameter {} outside [0,1]".format(t))
    return SurfacePoint(PointType.EDGE, halfedge=int(h), t=float(min(max(t, 0.0), 1.0)))

def face_point(f, bary):
    bary = np.asarray(bary, dtype=float)
    if len(bary) != 3 or abs(np.sum(bary) - 1) > 1e-6 or np.min(bary) < -1e-6 or np.max(bary) > 1 + 1e-6:
        raise ValueError("invalid barycentric coordinates {} in face {}".format(bary.tolist(), f))
    return SurfacePoint(PointType.FACE, face=int(f), bary=tuple(float(b) for b in bary))

# halfedges of f in corner order
def face_corners(C, f):
    h0 = C.f2he[f]
    h1 = C.next_he[h0]
    return [h0, h1, C.next_he[h1]]

# faces a point can be expressed in, increasing ids
def adjacent_faces(C, p):
    if p.kind == PointType.VERTEX:
        return sorted(set(C.he2f[h] for h in np.nonzero(C.fr == p.vertex)[0]))
    elif p.kind == PointType.EDGE:
        return sorted(set([C.he2f[p.halfedge], C.he2f[C.opp[p.halfedge]]]))
    else:
        return [p.face]

# barycentric coordinates of p in the face f
# raises ValueError if p does not lie on the closure of f
def in_face(C, p, f):
    hs = face_corners(C, f)
    bary = np.zeros(3)
    if p.kind == PointType.VERTEX:
        for k in range(3):
            if C.fr[hs[k]] == p.vertex:
                bary[k] = 1.0
                return bary
    elif p.kind == PointType.EDGE:
        h = p.halfedge
        for k in range(3):
            if hs[k] == h:
                bary[k] = 1 - p.t; bary[(k+1)%3] = p.t
                return bary
            if hs[k] == C.opp[h]:
                bary[k] = p.t; bary[(k+1)%3] = 1 - p.t
                return bary
    elif p.face == f:
        return np.array(p.bary)
    raise ValueError("surface point {} is not in face {}".format(p, f))

# a face containing both points; when several faces qualify the lowest id is used
def shared_face(C, pA, pB):
    common = sorted(set(adjacent_faces(C, pA)).intersection(adjacent_faces(C, pB)))
    if len(common) == 0:
        raise ValueError("surface points {} and {} share no face".format(pA, pB))
    return common[0]

# convert face points at a corner to vertex points, on an edge to edge points
def canonicalize(C, p, eps=BARY_EPS):
    if p.kind != PointType.FACE:
        return p
    hs = face_corners(C, p.face)
    bary = np.array(p.bary)
    k_max = int(np.argmax(bary))
    if bary[k_max] >= 1 - eps:
        return vertex_point(C.fr[hs[k_max]])
    k_min = int(np.argmin(bary))
    if bary[k_min] <= eps:
        # the zero coordinate is at the corner opposite halfedge hs[k_min+1]
        h = hs[(k_min+1)%3]
        t = bary[(k_min+2)%3]/(bary[(k_min+1)%3] + bary[(k_min+2)%3])
        return edge_point(h, t)
    return p

# position of the point for vertex positions v3d of C
def embedded_position(C, v3d, p):
    if p.kind == PointType.VERTEX:
        return v3d[p.vertex].copy()
    elif p.kind == PointType.EDGE:
        return (1 - p.t)*v3d[C.fr[p.halfedge]] + p.t*v3d[C.to[p.halfedge]]
    hs = face_corners(C, p.face)
    return np.array(p.bary) @ v3d[C.fr[hs]]
