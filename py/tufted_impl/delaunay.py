import logging
import numpy as np

from tufted_impl.halfedge import *
from tufted_impl.signpost import *

logger = logging.getLogger(__name__)

# edges with Delaunay index in [-DELAUNAY_EPS, 0) are considered Delaunay, so that
# cocircular configurations are not flipped back and forth
DELAUNAY_EPS = 1e-10

#  cosine theorem: cos of the angle opposite ld in the triangle with sides ld, la, lb
def Delaunay_ind_T(ld,la,lb):
#    return (la**2 + lb**2 -ld**2)/(2*la*lb)
    return (la/lb + lb/la -(ld/la)*(ld/lb))/2

# cos(alpha) + cos(beta) for the two angles opposite the edge of h;
# nonnegative iff alpha + beta <= pi
def Delaunay_ind(C,l,h):
    hd = h; hb = C.next_he[hd]; ha = C.next_he[hb]
    hdo = C.opp[hd]; hao = C.next_he[hdo]; hbo = C.next_he[hao]
    return Delaunay_ind_T(l[hd], l[ha], l[hb]) + Delaunay_ind_T(l[hd], l[hao], l[hbo])

def Delaunay_test(C,l,h):
    ind = Delaunay_ind(C,l,h)
    return ind, ind >= -DELAUNAY_EPS

def is_Delaunay(C,l):
    ok = True
    for h in edge_halfedges(C):
        ind, is_Del = Delaunay_test(C,l,h)
        if not is_Del:
            logger.debug('non-Delaunay edge {} faces {} Del ind = {}'.format(h, [C.he2f[h], C.he2f[C.opp[h]]], ind))
            ok = False
    return ok

# Intrinsic Delaunay flips
#
# input: signpost triangulation T
#
# result: in-place modification of T: all edges Delaunay, with lengths, corners and
#   signposts updated by each flip; returns the number of flips
#
# raises RuntimeError if the number of flips exceeds max_flips, which defaults to a
# generous multiple of the number of edges
def make_delaunay(T, max_flips=None):
    C = T.C
    n_he = len(C.next_he)
    if max_flips is None:
        max_flips = 100*n_he + 1000
    flips = 0
    stk = []
    mark = [False for h in range(0,n_he)]
    for h in edge_halfedges(C):  # pick the smaller id halfedge
        stk.append(h)
        mark[h] = True
    while stk:
        hd = stk.pop(-1)
        mark[hd] = False
        ind, is_Del = Delaunay_test(C,T.l,hd)
        if is_Del:
            continue
        hb = C.next_he[hd]; ha = C.next_he[hb]
        hdo = C.opp[hd]; hao = C.next_he[hdo]; hbo = C.next_he[hao]
        if not flip_edge(T, hd):
            logger.debug('cannot flip non-Delaunay edge {}, Del ind = {}'.format(hd, ind))
            continue
        flips += 1
        if flips > max_flips:
            raise RuntimeError('Delaunay flipping did not terminate after {} flips'.format(max_flips))
        if flips % 100000 == 0:
            logger.info('flips {}'.format(flips))
        ind_post, is_Del_post = Delaunay_test(C,T.l,hd)
        if not is_Del_post:
            logger.debug('flipping non-Delaunay edge {} resulted in non-Delaunay, inds {} {}'.format(hd, ind, ind_post))
        for hef in [ha, hb, hao, hbo]:
            if (hef < C.opp[hef] and not mark[hef]):
                stk.append(hef)
                mark[hef] = True
            elif (hef > C.opp[hef] and not mark[C.opp[hef]]):
                stk.append(C.opp[hef])
                mark[C.opp[hef]] = True
    logger.info('made triangulation Delaunay with {} flips'.format(flips))
    return flips

# the two angles opposite each edge sum to at most pi + tol
def check_angle_condition(T, tol=1e-8):
    C = T.C
    ok = True
    for h in edge_halfedges(C):
        ang = T.corner[C.next_he[C.next_he[h]]] + T.corner[C.next_he[C.next_he[C.opp[h]]]]
        ok = check_cond(ang <= np.pi + tol, 'edge {} has opposite angle sum {}'.format(h, ang)) and ok
    return ok
