# Connectivity structure (halfedge, fixed-size mesh)
#   NO = (N,O) minimal representation of a closed halfedge mesh described below
#
# Main functions:
#
# FV_to_edges(F)  edge topology of a triangle soup, works for non-manifold input
#
# NO_to_connectivity(next_he,opp)   build a complete halfedge structure (below) from NO
#
# NO_connected_components(C)   find connected components of a mesh
#
# euler_characteristic_from_connectivity(C)  for each connected component, determine V - E + F
#
# is_valid_connectivity(C)    tests if a connectivity structure is valid, as defined below
#
# regular_flip(C,h)  connectivity part of an edge flip
#
#  Auxiliary functions
#
# build_orbits(perm)  build orbits of a permutation
# copy_namedtuple(N)   copy namedtuples
# face_halfedges(C), edge_halfedges(C), vertex_halfedges(C,v)
# build_face(C,he_list,to_list, f)
#
# Meshes produced by the tufted cover are closed, so unlike general halfedge
# structures there are no boundary loops: every halfedge has an opposite.
#
# n_he: number of haldgedges; n_he = 2*number of edges
# n_v:  number of vertices, needs to match the number of orbits in the circulator  P \circ O (below)
# n_f:  number of faces, needs to match the number of orbits in the next-halfedge permutation N
#
# next_he: (n_he) next halfedge map N; the only requirement is bijectivity of N  on 0..n_he-1
# opp:     (n_he) opposite-halfedge map O; bijective involution O^2 = I, with all orbits of length exactly 2
# to:      (n_he) head vertex of a halfedge; all halfedges in an orbit of P \circ O have the same value
# fr:      (n_he) tail vertex of a halfedge  fr[h] = to[opp[h]]
# he2f:    (n_he) face of the halfedge, faces numbered by orbits of N in order of their smallest halfedge
# out:     (n_v) a halfedge for which the vertex is the tail
# f2he:    (n_f) a halfedge belonging to a face; the corners of a face are listed starting from
#          fr[f2he[f]] and following next_he
# prev_he: (n_he) prev halfedge; inverse of N.
#
# Halfedges around a vertex: h -> opp[prev_he[h]] rotates counter-clockwise,
# h -> next_he[opp[h]] clockwise.

import logging
import numpy as np
from collections import namedtuple

logger = logging.getLogger(__name__)

Connectivity = namedtuple('Connectivity','next_he prev_he opp to fr he2f out f2he')

# edge topology of a triangle soup
#   E:   (n_e x 2) unique edges, sorted endpoints
#   FE:  (n_f x 3) edge of the corner pair (F[i,k], F[i,(k+1)%3])
#   e2f: list of lists of (face, corner) incident to each edge
EdgeTopology = namedtuple('EdgeTopology','E FE e2f')

def check_cond(cond,message):
    if not cond:
        logger.warning(message)
        return False
    else:
        return True

# in: perm a permutation  given by a list of non-repeating integers in the range 0..len(perm)
# returns: a list of lists, each list represents a cycle of perm
# the order of lists is in the order of the smallest halfedge index in each cycle, this is used in several places
def build_orbits(perm):
    visited = [False]*(max(perm)+1)
    cycles = []
    for i in range(0,max(perm)+1):
        if not visited[i]:
            cycles.append([])
            i_it = i
            while True:
                visited[i_it] = True
                cycles[-1].append(i_it)
                i_it = perm[i_it]
                if i_it == i:
                    break
    return cycles

# in:  F (n_f x 3) triangles, may be non-manifold, non-orientable or have boundary
# returns: EdgeTopology
# raises ValueError for faces that are not triangles or repeat a vertex
def FV_to_edges(F):
    F = np.asarray(F, dtype=int)
    if F.ndim != 2 or F.shape[1] != 3:
        raise ValueError("expected a (n_f x 3) array of triangles, got shape {}".format(F.shape))
    if len(F) == 0:
        raise ValueError("mesh has no faces")
    if np.min(F) < 0:
        raise ValueError("negative vertex index in faces")
    repeated = np.nonzero((F[:,0] == F[:,1]) | (F[:,1] == F[:,2]) | (F[:,2] == F[:,0]))[0]
    if len(repeated) > 0:
        raise ValueError("faces with repeated vertices: {}".format(repeated.tolist()))

    tail = F.flatten()
    head = F[:,[1,2,0]].flatten()
    lo = np.minimum(tail, head)
    hi = np.maximum(tail, head)
    n_v = np.max(F)+1
    # unique (lo, hi) pairs, encoded as a single integer key
    pairs, inverse = np.unique(lo*n_v + hi, return_inverse=True)
    E = np.stack((pairs // n_v, pairs % n_v), axis=1)
    FE = np.reshape(inverse, (len(F),3))

    e2f = [[] for _ in range(len(E))]
    for i in range(len(F)):
        for k in range(3):
            e2f[FE[i,k]].append((i,k))
    return EdgeTopology(E=E, FE=FE, e2f=e2f)

# in:
#      next_he, opp as defined in Connectivity
# returns:
#   Connectivity structure C, with fields above plus inferred from these:
#   * he2f:    index of face for each halfedge (faces ordered as next_he orbits, i.e., by minimal halfedge index
#   * prev_he: inverse of next_he
#   * to:      index of the vertex halfedge is pointing to (vertices ordered as circulator orbits, i.e., by minimal index
#            of the halfedge pointing to v
#   * fr:      tails of halfedges
#   * f2he:    an index of a halfedge of f (initially set to the min index halfedge in the face)
#   * out:     an index of a halfedge pointing from v
def NO_to_connectivity(next_he,opp):
    next_he = np.array(next_he,dtype=int)
    opp = np.array(opp,dtype=int)
    n_he = len(next_he)
    prev_he = (-1)*np.ones((n_he,),dtype=int)
    prev_he[next_he] = np.arange(0,n_he)
    faces = build_orbits(next_he)

    f2he = np.array([f[0] for f in faces],dtype=int)
    he2f = np.zeros((n_he,),dtype=int)
    for i,f in enumerate(faces):
        he2f[f] = i

    circ = prev_he[opp]
    vert = build_orbits(circ)     # lists of halfedge pointing to each vertex
    out  = np.array([next_he[v[0]] for v in vert],dtype=int)
    to   = (-1)*np.ones((n_he,),dtype=int)
    for i,v in enumerate(vert):
        to[v] = i
    # tail (fr) vertex of a halfedge =  head vertex of opposite
    fr = to[opp]
    return Connectivity(next_he=next_he, prev_he=prev_he, opp=opp, to=to, fr=fr, he2f=he2f, out=out, f2he=f2he)

# extract connected components from a mesh
# in: Connectivity structure
# returns: list of lists of indices of faces, one per component
def NO_connected_components(C):
    visited = [False]*len(C.f2he)
    component_faces = []
    for f in range(0,len(C.f2he)):
        if not visited[f]:
            stk = [f]
            component_faces.append([])
            while len(stk) > 0:
                fc = stk.pop();
                if not visited[fc]:
                    visited[fc] = True
                    component_faces[-1].append(fc)
                    he = C.f2he[fc]; he_it = he
                    while True:
                        fn = C.he2f[C.opp[he_it]]
                        if not visited[fn]:
                            stk.append(fn)
                        he_it = C.next_he[he_it]
                        if he_it == he:
                            break
    return component_faces

# V - E + F for each connected component (2 for a sphere)
def euler_characteristic_from_connectivity(C):
    comp_faces = NO_connected_components(C)
    faces = face_halfedges(C)
    chi = []
    for c in comp_faces:
        he = faces[c].flatten()
        chi.append(len(np.unique(C.to[he])) - len(he)//2 + len(c))
    return chi

# (n_f x 3) halfedges of each face, starting at f2he
def face_halfedges(C):
    h0 = np.asarray(C.f2he)
    h1 = C.next_he[h0]
    h2 = C.next_he[h1]
    return np.stack((h0,h1,h2),axis=1)

# one representative halfedge per edge, the one with the smaller index
def edge_halfedges(C):
    h = np.arange(len(C.next_he))
    return h[h < C.opp]

# outgoing halfedges of v in counter-clockwise order, starting from out[v]
def vertex_halfedges(C,v):
    h0 = C.out[v]
    ring = [h0]
    h = C.opp[C.prev_he[h0]]
    while h != h0:
        ring.append(h)
        h = C.opp[C.prev_he[h]]
        assert len(ring) <= len(C.next_he), "vertex circulator does not close"
    return ring

# helper function for flips, modify connectivity to create a new face from existing halfedges indices
# and assign it an existing index
# in:
#  C Connectivity structure
#  he_list:  a list of halfedge indices to form a face, so that next_he is cyclic on he_list
#  to_list:  the list of endpoints to set for each halfedge
#  f: face index to use
# !!!! no attempt is made to verify that the operation produces a valid mesh
def build_face(C,he_list,to_list, f):
    he_list_next = he_list[1:]+[he_list[0]]
    he_list_prev = [he_list[-1]]+he_list[0:-1]
    C.next_he[he_list] = he_list_next
    C.prev_he[he_list] = he_list_prev
    C.to[he_list] = to_list
    C.fr[he_list] = [to_list[-1]] + to_list[:-1]
    C.he2f[he_list] = f
    C.out[to_list] = he_list_next
    C.f2he[f] = he_list[0]

# flip the edge of h in place, reusing the halfedge and face indices
#
#        vg                     vg
#       /  \                   /|\
#     hb    ha               hb | ha
#     /  hd  \      ->       /  |  \
#   vb ------ va           vb  hd   va
#     \  hdo /               \  |  /
#     hbo   hao              hbo | hao
#       \  /                   \|/
#        vgo                    vgo
#
# after the flip hd runs vgo -> vg, hdo runs vg -> vgo
# returns the four halfedges of the quad boundary
def regular_flip(C,h):
    hd  = h;        hb  = C.next_he[hd ]; ha  = C.next_he[hb ]
    hdo = C.opp[h]; hbo = C.prev_he[hdo]; hao = C.prev_he[hbo]
    va = C.to[ha];  vb = C.to[hd]; vg = C.to[hb]; vgo = C.fr[hbo]
    f = C.he2f[hd];  fo = C.he2f[hdo]
    build_face(C,[hd, ha, hao],[vg, va,vgo],f)
    build_face(C,[hdo,hbo,hb ],[vgo,vb,vg ],fo)
    return [ha,hb,hao,hbo]

# the quad around hd consists of two distinct triangles glued along hd only
def check_flap(C, hd):
    hb = C.next_he[hd]; ha = C.next_he[hb];
    hdo = C.opp[hd]; hao = C.next_he[hdo]; hbo = C.next_he[hao];
    if hd in (ha, hb) or hdo in (hao, hbo):
        return False
    if (C.next_he[ha] != hd) or (C.next_he[hbo] != hdo):
        return False
    # self adjacent triangles
    if C.he2f[hd] == C.he2f[hdo]:
        return False
    return True

# check validity of the (next_he, opp) any valid combination defines an oriented closed manifold surface
def is_valid_NO(next_he,opp):
    prev_he = (-1)*np.ones((len(next_he),),dtype=int)
    prev_he[next_he] = np.arange(0,len(next_he))
    # all entries of prev_he were filled = next_he has len(next_he) distinct values in the range (0..n_he)
    ok = check_cond( (prev_he != -1).all(), 'not all halfedges are present in next_he')
    # opp should be an involution this implies bijectivity
    ident = np.arange(0,len(opp))
    ok = ok and check_cond(len(np.argwhere(opp[opp] != ident)) == 0, 'opp^2 != id')
    # opp cannot have fixed points
    ok = ok and check_cond(len(np.argwhere(opp == ident)) == 0, 'opp[h]=h for some h')
    return ok

# Validity of the vertex-related fields to,out,fr in Connectivity
def is_valid_vert(next_he,opp,to,out,fr):
    prev_he = (-1)*np.ones((len(next_he),),dtype=int)
    prev_he[next_he] = np.arange(0,len(next_he))
    circ = prev_he[opp]
    verts = build_orbits(circ)
    n_v = len(verts)
    # indices of vertices are  continous 0.. n_v
    ok = check_cond(np.max(to) == n_v-1 and len(np.unique(to)) == n_v,
                    'number of vertices in "to" does not match the number of orbits')
    # verify there is a single index per set
    to_index_set_sizes = np.array([len(np.unique(to[v])) for v in verts])
    ok = ok and check_cond( (to_index_set_sizes == 1).all(),'multiple vertices per orbit of circulator')
    ok = ok and check_cond( len(out) == n_v, '# of circulator orbits does not match number of vertices')
    ok = ok and check_cond( (to[opp[out]] == np.arange(0,n_v)).all(), 'out-halfedge tail is not vertex')
    ok = ok and check_cond( (fr == to[opp]).all(), 'fr does not agree with to')
    return ok

# Verifies validity of face-related fields in Connectivity, he2f, f2he
def is_valid_faces(next_he,he2f,f2he):
    faces = build_orbits(next_he)
    n_f = len(faces)
    ok = check_cond( np.max(he2f) == n_f-1 and len(np.unique(he2f)) == n_f, 'face indices are not continuous 0..n_f')
    he2f_index_set_sizes = np.array([len(np.unique(he2f[f])) for f in faces])
    ok = ok and check_cond( (he2f_index_set_sizes == 1).all(), 'more than one face per orbit of next_he')
    ok = ok and check_cond(len(f2he) == n_f,'number of faces does not match the number of orbits')
    ok = ok and check_cond( (he2f[f2he] == np.arange(0,n_f)).all(), 'f2he halfedge does not belong to the face')
    ok = ok and check_cond( all(len(f) == 3 for f in faces), 'non-triangular face')
    return ok

# Validates all components of a Connectivity structure using functions above
def is_valid_connectivity(C):
    ok = is_valid_NO(C.next_he,C.opp)
    ok = ok and is_valid_vert(C.next_he,C.opp,C.to,C.out,C.fr)
    ok = ok and is_valid_faces(C.next_he,C.he2f,C.f2he)
    return ok

# assumes copy defined for components of namedtuple
def copy_namedtuple(N):
    return type(N)(*[x.copy() for x in N])
