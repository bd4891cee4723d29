# Signpost intrinsic triangulation
#
# Main functions:
#
# build_signpost_triangulation(C, l)   intrinsic triangulation initially equal to (C, l)
# flip_edge(T, h)                      intrinsic edge flip updating lengths, angles and signposts together
# trace_halfedge(T, h)                 path of a current intrinsic halfedge over the input triangulation
# trace_input_halfedge(T, h)           path of an input halfedge over the current triangulation
# check_signposts(T)                   consistency of signposts with the current lengths
#
# The signpost of a halfedge h is the direction of h at its tail vertex v, the angle measured
# counter-clockwise from the input outgoing halfedge C_in.out[v], in [0, angle_sum[v]).
# Angles are not rescaled to 2 pi, so the signposts of the input and the current triangulation
# refer to the same directions at each vertex. Vertex ids are shared by both triangulations.
#
# Lengths, corner angles and signposts of the current triangulation are only modified by flip_edge.

import logging
import math
import numpy as np
from dataclasses import dataclass

from tufted_impl.halfedge import *
from tufted_impl.geomops import *
from tufted_impl.trace import *

logger = logging.getLogger(__name__)

@dataclass
class SignpostTriangulation:
    C_in:        Connectivity
    l_in:        np.ndarray
    corner_in:   np.ndarray
    signpost_in: np.ndarray
    C:           Connectivity
    l:           np.ndarray
    corner:      np.ndarray
    signpost:    np.ndarray
    angle_sum:   np.ndarray   # per vertex, identical for the input and current triangulation

# signposts accumulated counter-clockwise around each vertex, starting at out[v]
def compute_signposts(C, corner):
    signpost = np.zeros(len(C.next_he))
    for v in range(len(C.out)):
        theta = 0.0
        for h in vertex_halfedges(C, v):
            signpost[h] = theta
            theta += corner[h]
    return signpost

def build_signpost_triangulation(C, l):
    l = np.array(l, dtype=float)
    if len(l) != len(C.next_he):
        raise ValueError("expected {} halfedge lengths, got {}".format(len(C.next_he), len(l)))
    if not np.allclose(l, l[C.opp], rtol=1e-12, atol=0):
        raise ValueError("lengths of opposite halfedges differ")
    corner = corner_angles(C, l)
    signpost = compute_signposts(C, corner)
    angle_sum = vertex_angle_sums(C, corner)
    return SignpostTriangulation(
        C_in=C, l_in=l, corner_in=corner, signpost_in=signpost,
        C=copy_namedtuple(C), l=l.copy(), corner=corner.copy(), signpost=signpost.copy(),
        angle_sum=angle_sum)

# flip the edge of h, keeping halfedge and face ids
# returns False and leaves T unchanged if the edge cannot be flipped:
# the two faces are the same or share another edge, or the quad around the edge is not convex
def flip_edge(T, h):
    C = T.C; l = T.l; corner = T.corner
    if not check_flap(C, h):
        return False
    hd = h;        hb = C.next_he[hd]; ha = C.next_he[hb]
    hdo = C.opp[h]; hao = C.next_he[hdo]; hbo = C.next_he[hao]
    # angles of the quad at va (tail of hd) and vb (tail of hdo)
    ang_a = corner[hd] + corner[hao]
    ang_b = corner[hdo] + corner[hb]
    if ang_a >= math.pi or ang_b >= math.pi:
        return False

    ld = len_from_ang(l[ha], l[hao], ang_a)
    # new faces (hd, ha, hao) and (hdo, hbo, hb), corners at the tails
    f, fo = C.he2f[hd], C.he2f[hdo]
    new_corner = {
        hd:  ang_from_len(ld, l[hao], l[ha], face=f),
        ha:  ang_from_len(l[ha], ld, l[hao], face=f),
        hao: ang_from_len(l[hao], l[ha], ld, face=f),
        hdo: ang_from_len(ld, l[hb], l[hbo], face=fo),
        hbo: ang_from_len(l[hbo], ld, l[hb], face=fo),
        hb:  ang_from_len(l[hb], l[hbo], ld, face=fo),
    }

    regular_flip(C, hd)
    l[hd] = ld; l[hdo] = ld
    for hk, ang in new_corner.items():
        corner[hk] = ang
    # hd now leaves vgo counter-clockwise after hbo, hdo leaves vg counter-clockwise after ha
    T.signpost[hd] = (T.signpost[hbo] + corner[hbo]) % T.angle_sum[C.fr[hd]]
    T.signpost[hdo] = (T.signpost[ha] + corner[ha]) % T.angle_sum[C.fr[hdo]]
    return True

# signposts and corners agree with the lengths of the current triangulation
def check_signposts(T, tol=1e-8):
    C = T.C
    ok = check_cond(np.allclose(T.corner, corner_angles(C, T.l), atol=tol), 'corner angles do not match lengths')
    ok = ok and check_cond(np.allclose(vertex_angle_sums(C, T.corner), T.angle_sum, atol=tol*len(C.next_he)),
                           'vertex angle sums changed')
    for v in range(len(C.out)):
        if not ok:
            break
        theta = T.angle_sum[v]
        for h in vertex_halfedges(C, v):
            hn = C.opp[C.prev_he[h]]
            diff = (T.signpost[h] + T.corner[h] - T.signpost[hn]) % theta
            ok = ok and check_cond(min(diff, theta - diff) < tol*len(C.next_he),
                                   'signpost of halfedge {} inconsistent at vertex {}'.format(hn, v))
    return ok

# path of the current intrinsic halfedge h over the input triangulation, as points on C_in
def trace_halfedge(T, h, trim_end=True):
    target = T.C.to[h] if trim_end else None
    return trace_geodesic(T.C_in, T.l_in, T.corner_in, T.signpost_in, T.angle_sum,
                          T.C.fr[h], T.signpost[h], T.l[h], target=target)

# path of the input halfedge h over the current triangulation, as points on C
def trace_input_halfedge(T, h, trim_end=True):
    target = T.C_in.to[h] if trim_end else None
    return trace_geodesic(T.C, T.l, T.corner, T.signpost, T.angle_sum,
                          T.C_in.fr[h], T.signpost_in[h], T.l_in[h], target=target)
