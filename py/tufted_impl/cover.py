# Tufted cover of a (possibly non-manifold, possibly boundary-having) triangle mesh
#
# Main functions:
#
# build_tufted_cover(v, f, edge_lengths=None)  manifold closed cover with per halfedge lengths
#
# The cover takes two copies of every face, one for each orientation, and glues them around each
# input edge in the cyclic order of the faces around that edge: the side of a face looking at the
# next face is glued to the side of the next face looking back at it. A boundary edge glues
# the two copies of its face, a manifold edge produces two sheets, and an edge shared by k faces
# produces k cover edges. Vertices of the cover are the orbits of the circulator of the glued
# halfedges, so non-manifold vertices are split into one copy per fan.
#
# Meshes where every edge has exactly two faces traversing it in opposite directions are
# used as is, without doubling.
#
# Halfedge numbering: halfedge 3*i+k of face i runs from f[i,k] to f[i,(k+1)%3];
# for the doubled cover, face n_f+i is face i reversed, (f[i,0], f[i,2], f[i,1]), with halfedges
# 3*n_f + 3*i + k, and halfedge 3*i+k is the reversal of 3*n_f + 3*i + (2-k)

import logging
import numpy as np
from dataclasses import dataclass

from tufted_impl.halfedge import *
from tufted_impl.geomops import *

logger = logging.getLogger(__name__)

@dataclass
class TuftedCover:
    C:            Connectivity
    l:            np.ndarray   # per halfedge lengths
    v3d:          np.ndarray   # cover vertex positions, copied from the input
    vtx_reindex:  np.ndarray   # cover vertex -> input vertex
    he2orig_face: np.ndarray   # cover halfedge -> input face
    n_sheets:     int          # 1 if the input was used as is, 2 for the doubled cover


def edge_lengths_from_positions(v, E):
    return np.linalg.norm(v[E[:,1]] - v[E[:,0]], axis=1)

def is_oriented_edge_manifold(f, topo):
    for e, incident in enumerate(topo.e2f):
        if len(incident) != 2:
            return False
        (f0,k0), (f1,k1) = incident
        # the two faces must traverse the edge in opposite directions
        if f[f0,k0] == f[f1,k1]:
            return False
    return True

# sort the faces around edge e = (a,b) by the angle of their third vertex about the axis a -> b
# returns the faces (and corners) in counter-clockwise order about the axis
def sort_faces_around_edge(v, f, E_e, incident):
    if v is None or len(incident) <= 2:
        return sorted(incident)
    a, b = E_e
    axis = v[b] - v[a]
    axis_norm = np.linalg.norm(axis)
    if axis_norm == 0:
        return sorted(incident)
    axis = axis/axis_norm
    angles = []
    ref_x = None
    for (fi,k) in incident:
        c = f[fi,(k+2)%3]
        u = v[c] - v[a]
        u = u - np.dot(u,axis)*axis
        if ref_x is None:
            ref_x = u/max(np.linalg.norm(u), 1e-300)
            ref_y = np.cross(axis, ref_x)
        angles.append(np.arctan2(np.dot(u,ref_y), np.dot(u,ref_x)) % (2*np.pi))
    order = sorted(range(len(incident)), key=lambda i: (angles[i], incident[i][0]))
    return [incident[i] for i in order]

# halfedge maps of the input used as is, no doubling
def NO_single_sheet(f, topo):
    n_f = len(f)
    next_he = np.array([3*i + (k+1)%3 for i in range(n_f) for k in range(3)], dtype=int)
    opp = (-1)*np.ones((3*n_f,),dtype=int)
    for incident in topo.e2f:
        (f0,k0), (f1,k1) = incident
        opp[3*f0+k0] = 3*f1+k1
        opp[3*f1+k1] = 3*f0+k0
    return next_he, opp

# halfedge maps of the doubled cover
def NO_double(v, f, topo):
    n_f = len(f)
    n_he = 3*n_f
    next_he = np.concatenate([
        np.array([3*i + (k+1)%3 for i in range(n_f) for k in range(3)], dtype=int),
        np.array([n_he + 3*i + (k+1)%3 for i in range(n_f) for k in range(3)], dtype=int)])
    opp = (-1)*np.ones((2*n_he,),dtype=int)
    for e, incident in enumerate(topo.e2f):
        a = topo.E[e,0]
        fins = sort_faces_around_edge(v, f, topo.E[e], incident)
        # for each fin, the copy traversing the edge a -> b faces the next fin (counter-clockwise),
        # the copy traversing b -> a faces the previous one
        ccw_side = []
        cw_side = []
        for (fi,k) in fins:
            h_pos = 3*fi + k
            h_neg = n_he + 3*fi + (2-k)
            if f[fi,k] == a:
                ccw_side.append(h_pos); cw_side.append(h_neg)
            else:
                ccw_side.append(h_neg); cw_side.append(h_pos)
        n_fins = len(fins)
        for i in range(n_fins):
            h = ccw_side[i]; ho = cw_side[(i+1) % n_fins]
            opp[h] = ho
            opp[ho] = h
    return next_he, opp

def log_cover_statistics(cover, n_v_in):
    C = cover.C
    n_split = len(cover.vtx_reindex) - len(np.unique(cover.vtx_reindex))
    chi = euler_characteristic_from_connectivity(C)
    logger.info("tufted cover: {} vertices, {} edges, {} faces, {} sheet(s), {} components, euler characteristics {}".format(
        len(C.out), len(C.next_he)//2, len(C.f2he), cover.n_sheets, len(chi), chi))
    if n_split > 0:
        logger.info("separated {} vertex copies from {} input vertices".format(n_split, n_v_in))

# in:
#   v:  (n_v x 3) vertex positions, used for ordering faces around edges and for default lengths;
#       may be None if edge_lengths are given
#   f:  (n_f x 3) triangles
#   edge_lengths: optional length per edge of FV_to_edges(f).E
# returns: TuftedCover; the input arrays are not modified
def build_tufted_cover(v, f, edge_lengths=None):
    f = np.asarray(f, dtype=int)
    topo = FV_to_edges(f)
    if v is not None:
        v = np.array(v, dtype=float)
        if np.max(f) >= len(v):
            raise ValueError("face index {} out of range for {} vertices".format(np.max(f), len(v)))
    if edge_lengths is None:
        if v is None:
            raise ValueError("either vertex positions or edge lengths are required")
        edge_lengths = edge_lengths_from_positions(v, topo.E)
    edge_lengths = np.asarray(edge_lengths, dtype=float)
    if len(edge_lengths) != len(topo.E):
        raise ValueError("expected {} edge lengths, got {}".format(len(topo.E), len(edge_lengths)))

    n_f = len(f)
    if is_oriented_edge_manifold(f, topo):
        next_he, opp = NO_single_sheet(f, topo)
        n_sheets = 1
        tail = f.flatten()
        he_edge = topo.FE.flatten()
        he2orig_face = np.repeat(np.arange(n_f), 3)
    else:
        next_he, opp = NO_double(v, f, topo)
        n_sheets = 2
        f_rev = f[:,[0,2,1]]
        tail = np.concatenate([f.flatten(), f_rev.flatten()])
        # reversed face halfedge k is the reversal of halfedge 2-k of the original face
        he_edge = np.concatenate([topo.FE.flatten(), topo.FE[:,[2,1,0]].flatten()])
        he2orig_face = np.concatenate([np.repeat(np.arange(n_f), 3), np.repeat(np.arange(n_f), 3)])
    assert (opp != -1).all(), "unpaired halfedge in the tufted cover"

    C = NO_to_connectivity(next_he, opp)
    vtx_reindex = tail[C.out]
    l = edge_lengths[he_edge]
    v3d = v[vtx_reindex] if v is not None else None
    cover = TuftedCover(C=C, l=l, v3d=v3d, vtx_reindex=vtx_reindex,
                        he2orig_face=he2orig_face, n_sheets=n_sheets)
    log_cover_statistics(cover, 0 if v is None else len(v))
    return cover

# cover vertices that are copies of the input vertex v_in
def cover_vertices(cover, v_in):
    return np.nonzero(cover.vtx_reindex == v_in)[0]

# cover halfedges running between copies of the input vertices a and b
def cover_halfedges(cover, a, b):
    C = cover.C
    return np.nonzero((cover.vtx_reindex[C.fr] == a) & (cover.vtx_reindex[C.to] == b))[0]
