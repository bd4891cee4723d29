import math
import numpy as np

from tufted_impl.halfedge import *


class DegenerateTriangleError(ValueError):
    """
    Raised when a triangle does not strictly satisfy the triangle inequality,
    so that its angles cannot be computed from edge lengths.
    """
    def __init__(self, faces, lengths=None):
        self.faces = list(faces)
        self.lengths = lengths
        message = "degenerate triangle(s) {}".format(self.faces[:10])
        if lengths is not None:
            message += " with edge lengths {}".format(np.asarray(lengths).tolist()[:10])
        super().__init__(message)


# strict triangle inequality test
def check_tri_ineq(l1,l2,l3):
    return ( l1+l2 - l3 > 0  and  l2+l3 - l1 > 0  and  l3+l1 - l2 > 0)

# angle opposite l3 from 3 edge lengths, using atan2 of the half angle
# raises DegenerateTriangleError unless the triangle inequality holds strictly
def ang_from_len(l1,l2,l3,face=None):
    t31 = l1+l2-l3; t23 = l1-l2+l3; t12 = -l1+l2+l3;
    l123 = l1+l2+l3;
    if not (t31 > 0 and t23 > 0 and t12 > 0):
        raise DegenerateTriangleError([face], [l1,l2,l3])
    denom = math.sqrt(t12*t23*t31*l123);
    return 2*math.atan2(t12*t23,denom);

def area_from_len(l1,l2,l3):  # area from 3 edge lengths
    t31 = l1+l2-l3; t23 = l1-l2+l3; t12 = -l1+l2+l3;
    return 0.25*math.sqrt(max(0.0, t12*t23*t31*(l1+l2+l3)))

# the three angles of each row of (n x 3) lengths, angle k opposite l[:,k]
def vec_ang_from_len(l, faces=None):
    lp1 = l[:,[1,2,0]]
    lp2 = l[:,[2,0,1]]
    t31 = lp1+lp2-l; t23 = lp1-lp2+l; t12 = -lp1+lp2+l;
    bad = np.nonzero(~(np.all(t31 > 0, axis=1) & np.all(t23 > 0, axis=1) & np.all(t12 > 0, axis=1)))[0]
    if len(bad) > 0:
        ids = bad if faces is None else np.asarray(faces)[bad]
        raise DegenerateTriangleError(ids.tolist(), l[bad[0]])
    l123 = np.tile(np.sum(l,axis=1),(3,1)).T
    denom = np.sqrt(t12*t23*t31*l123);
    return 2*np.arctan2(t12*t23,denom);

def vec_area_from_len(l):  # area from 3 edge lengths
    t31 = l[:,0]+l[:,1]-l[:,2]; t23 = l[:,0]-l[:,1]+l[:,2]; t12 = -l[:,0]+l[:,1]+l[:,2]
    return 0.25*np.sqrt(np.maximum(0.0, t12*t23*t31*np.sum(l,axis=1)))

# cosine theorem: length of the side opposite the angle between sides l1 and l2
def len_from_ang(l1,l2,angle):
    return math.sqrt(max(0.0, l1**2 + l2**2 - 2*l1*l2*math.cos(angle)))

# halfedge lengths from vertex positions
def lengths_from_positions(C, v3d):
    return np.linalg.norm(v3d[C.to] - v3d[C.fr], axis=1)

# per halfedge angle at the tail of h inside its face, i.e. the angle opposite next_he[h]
def corner_angles(C, l):
    fh = face_halfedges(C)
    # lengths opposite the corners at the tails of fh[:,0], fh[:,1], fh[:,2]
    l_opp = l[C.next_he[fh]]
    angles = vec_ang_from_len(l_opp, faces=np.arange(len(fh)))
    corner = np.zeros(len(C.next_he))
    corner[fh] = angles
    return corner

def corner_angle(C, l, h):
    return ang_from_len(l[h], l[C.prev_he[h]], l[C.next_he[h]], face=C.he2f[h])

# total angle around each vertex
def vertex_angle_sums(C, corner):
    return np.bincount(C.fr, weights=corner, minlength=len(C.out))

def face_areas(C, l):
    return vec_area_from_len(l[face_halfedges(C)])

# position of the third vertex x of triangle (a, b, x), counter-clockwise, given 2d positions of a and b
# and the lengths |ab|, |bx|, |xa|
def layout_third_vertex(pa, pb, lab, lbx, lxa, face=None):
    if not check_tri_ineq(lab, lbx, lxa):
        raise DegenerateTriangleError([face], [lab,lbx,lxa])
    u = (pb - pa)/np.linalg.norm(pb - pa)
    perp = np.array([-u[1], u[0]])
    x = (lab**2 + lxa**2 - lbx**2)/(2*lab)
    y = 2*area_from_len(lab,lbx,lxa)/lab
    return pa + x*u + y*perp
