import logging
import numpy as np

from tufted_impl.halfedge import *

logger = logging.getLogger(__name__)

DEFAULT_MOLLIFY_FACTOR = 1e-6

# Intrinsic mollification: the smallest uniform increase of all edge lengths such that every
# triangle satisfies the triangle inequality with margin delta = mollify_factor * mean edge length,
#   l_a + l_b - l_c >= delta   for every corner.
# Lengths only increase, and triangles that already have the margin get no change.
#
# in:  C Connectivity, l per halfedge lengths, mollify_factor >= 0 relative to the mean edge length
# returns: (new per halfedge lengths, the added amount eps)
def mollify_lengths(C, l, mollify_factor=DEFAULT_MOLLIFY_FACTOR):
    if mollify_factor < 0:
        raise ValueError("mollification factor must be non-negative, got {}".format(mollify_factor))
    l = np.array(l, dtype=float)
    if mollify_factor == 0:
        return l, 0.0

    delta = mollify_factor*np.mean(l)
    fl = l[face_halfedges(C)]
    # l_c - l_a - l_b + delta for the three choices of c
    violation = 2*fl - np.sum(fl, axis=1)[:,None] + delta
    eps = max(0.0, float(np.max(violation)))
    if eps > 0:
        logger.info("mollified edge lengths by {:.6g} (relative factor {:.3g})".format(eps, mollify_factor))
    return l + eps, eps
