# Straight line tracing over an intrinsic triangulation
#
# Main function:
#
# trace_geodesic(C, l, corner, signpost, angle_sum, v, angle, length, target=None)
#
# A straight path starting at vertex v is given by its direction, an angle measured
# counter-clockwise from the reference halfedge of v (in the same units as the signposts),
# and its length. The faces crossed by the path are unfolded one at a time into the plane:
# the current face is laid out in 2d with the path starting at the origin, and at each crossed
# edge the next face is attached on the far side of that edge. The path is returned as surface
# points on C together with the face of every segment, so consecutive points always
# have a known common face.

import logging
import numpy as np
from collections import namedtuple

from tufted_impl.halfedge import *
from tufted_impl.geomops import *
from tufted_impl.surface_point import *

logger = logging.getLogger(__name__)

# angle below which a direction is taken to run along an edge
ANGLE_EPS = 1e-9
# barycentric tolerance for the end point being inside the current face
INSIDE_EPS = 1e-9

# points: list of SurfacePoint; faces: face of the segment from points[i] to points[i+1]
TracedPath = namedtuple('TracedPath', 'points faces')

class TracingError(RuntimeError):
    pass

# barycentric coordinates of the 2d point p in the triangle with corners P (3 x 2)
def barycentric_2d(p, P):
    e0 = P[1] - P[0]; e1 = P[2] - P[0]; ep = p - P[0]
    det = e0[0]*e1[1] - e0[1]*e1[0]
    b1 = (ep[0]*e1[1] - ep[1]*e1[0])/det
    b2 = (e0[0]*ep[1] - e0[1]*ep[0])/det
    return np.array([1 - b1 - b2, b1, b2])

# intersection of the ray origin + s*d (s > 0) with the segment p + t*(q-p)
# returns (s, t), or None if the lines are parallel
def intersect_ray_segment_2d(origin, d, p, q):
    e = q - p
    denom = d[0]*e[1] - d[1]*e[0]
    if abs(denom) < 1e-300:
        return None
    w = p - origin
    s = (w[0]*e[1] - w[1]*e[0])/denom
    t = (w[0]*d[1] - w[1]*d[0])/denom
    return s, t

# corners of the face of h laid out with the tail of h at pa and its head at pb
# returns (face halfedges in corner order, (3 x 2) tail positions)
def layout_face(C, l, h, pa, pb):
    f = C.he2f[h]
    pc = layout_third_vertex(pa, pb, l[h], l[C.next_he[h]], l[C.prev_he[h]], face=f)
    tails = {h: pa, C.next_he[h]: pb, C.prev_he[h]: pc}
    hs = face_corners(C, f)
    return hs, np.array([tails[hk] for hk in hs])

# outgoing halfedge of v whose face contains the direction, and the angle of the direction
# inside that face measured from the halfedge
def find_wedge(C, corner, signpost, angle_sum, v, angle):
    if v < 0 or v >= len(C.out) or C.out[v] < 0:
        raise TracingError("cannot trace from isolated vertex {}".format(v))
    theta = angle_sum[v]
    angle = angle % theta
    for h in vertex_halfedges(C, v):
        local = (angle - signpost[h]) % theta
        if local < ANGLE_EPS or theta - local < ANGLE_EPS:
            return h, 0.0
        # along the next halfedge counter-clockwise
        if abs(local - corner[h]) < ANGLE_EPS:
            return C.opp[C.prev_he[h]], 0.0
        if local < corner[h]:
            return h, local
    raise TracingError("no face around vertex {} contains direction {}".format(v, angle))

def trace_geodesic(C, l, corner, signpost, angle_sum, v, angle, length, target=None, max_steps=None):
    """
    Trace a straight path of the given length from vertex v over the triangulation (C, l).

    param[in] C, l: connectivity and per halfedge lengths of the surface traced over
    param[in] corner, signpost, angle_sum: corner angles, signposts and vertex angle sums of (C, l)
    param[in] v, angle, length: start vertex, direction and length of the path
    param[in] target: if given, the vertex the path is known to end at; the end point is
        replaced by this vertex, and the path must end in a face incident to it
    param[in] max_steps: bound on the number of crossed faces, defaults to a multiple of the face count
    return: TracedPath
    """
    if length <= 0:
        raise TracingError("path length must be positive, got {}".format(length))
    h, local = find_wedge(C, corner, signpost, angle_sum, v, angle)
    start = vertex_point(v)

    # the path runs along an edge of the triangulation
    if local == 0.0:
        if length >= l[h]*(1 - 1e-9):
            if length > l[h]*(1 + 1e-9) or (target is not None and C.to[h] != target):
                raise TracingError("path from vertex {} along halfedge {} passes through vertex {}".format(v, h, C.to[h]))
            return TracedPath([start, vertex_point(C.to[h])], [C.he2f[h]])
        if target is not None:
            raise TracingError("path from vertex {} along halfedge {} ends before reaching vertex {}".format(v, h, target))
        return TracedPath([start, edge_point(h, length/l[h])], [C.he2f[h]])

    # unfold the face of h with v at the origin and h along the x axis
    hs, P = layout_face(C, l, h, np.zeros(2), np.array([l[h], 0.0]))
    d = np.array([np.cos(local), np.sin(local)])
    end = length*d
    f = C.he2f[h]
    h_entry = None

    points = [start]
    faces = []
    if max_steps is None:
        max_steps = 100*len(C.f2he) + 100
    for step in range(max_steps):
        bary = barycentric_2d(end, P)
        if np.min(bary) >= -INSIDE_EPS:
            faces.append(f)
            if target is not None:
                if target not in C.fr[hs]:
                    raise TracingError("path from vertex {} ends in face {} not incident to vertex {}".format(v, f, target))
                points.append(vertex_point(target))
            else:
                bary = np.maximum(bary, 0.0)
                points.append(canonicalize(C, face_point(f, bary/np.sum(bary))))
            return TracedPath(points, faces)

        # the edge the path leaves the face through: first crossing beyond the entry edge
        # leaving the start face, only the edge opposite v can be crossed
        if h_entry is None:
            candidates = [hs.index(C.next_he[h])]
        else:
            candidates = [k for k in range(3) if hs[k] != h_entry]
        best = None
        for k in candidates:
            hit = intersect_ray_segment_2d(np.zeros(2), d, P[k], P[(k+1)%3])
            if hit is None:
                continue
            s, t = hit
            if s <= 0 or t < -INSIDE_EPS or t > 1 + INSIDE_EPS:
                continue
            if best is None or s < best[1]:
                best = (k, s, t)
        if best is None:
            raise TracingError("path from vertex {} does not leave face {}".format(v, f))
        k, s, t = best
        t = min(max(t, 0.0), 1.0)
        h_exit = hs[k]
        faces.append(f)
        points.append(edge_point(h_exit, t))

        # attach the face across h_exit, its opposite runs from corner k+1 to corner k
        h_entry = C.opp[h_exit]
        hs, P = layout_face(C, l, h_entry, P[(k+1)%3], P[k])
        f = C.he2f[h_entry]
    raise TracingError("path from vertex {} did not end after {} faces".format(v, max_steps))
