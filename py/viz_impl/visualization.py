# Visualization of the intrinsic triangulation of a tufted cover
#
# Main functions:
#
# trace_intrinsic_edges(T, bubble, points_per_edge)  one polyline per intrinsic edge on the rounded surface
# generate_visualization(T, cover, params)           rounded surface soup and intrinsic edge polylines

import logging
import numpy as np
from dataclasses import dataclass
from tqdm import tqdm

from tufted_impl.halfedge import *
from tufted_impl.surface_point import *
from tufted_impl.signpost import *
from viz_impl.bubble import *

logger = logging.getLogger(__name__)

@dataclass
class VisualizationParams:
    subdiv_level:    int = 3
    bubble_scale:    float = 0.2
    points_per_edge: int = 10

    def __post_init__(self):
        if self.subdiv_level < 0:
            raise ValueError("subdivision level must be non-negative, got {}".format(self.subdiv_level))
        if not (0 <= self.bubble_scale <= 0.5):
            raise ValueError("bubble scale must be in [0, 0.5], got {}".format(self.bubble_scale))
        if self.points_per_edge < 0:
            raise ValueError("points per edge must be non-negative, got {}".format(self.points_per_edge))

# positions along a traced path: the path points, and points_per_edge samples interpolated
# in barycentric coordinates inside each segment's face
def path_to_polyline(C, path, bubble, points_per_edge):
    points = [bubble.query_point(path.points[0])]
    t = np.arange(1, points_per_edge+1)/(points_per_edge+1)
    for i, f in enumerate(path.faces):
        bA = in_face(C, path.points[i], f)
        bB = in_face(C, path.points[i+1], f)
        if points_per_edge > 0:
            B = (1 - t)[:,None]*bA + t[:,None]*bB
            points.extend(bubble.query_face(np.full(points_per_edge, f), B))
        points.append(bubble.query_point(path.points[i+1]))
    return np.array(points)

def trace_intrinsic_edges(T, bubble, points_per_edge=10, progress=False):
    """
    Trace every edge of the current intrinsic triangulation over the input surface.

    param[in] SignpostTriangulation T: intrinsic triangulation
    param[in] BubbleOffset bubble: offset map of the input triangulation T.C_in
    param[in] int points_per_edge: samples inserted inside each crossed face
    param[in] bool progress: show a progress bar
    return list: one (k x 3) polyline per edge
    """
    polylines = []
    edges = edge_halfedges(T.C)
    for h in tqdm(edges, disable=not progress, desc="tracing edges"):
        path = trace_halfedge(T, h)
        polylines.append(path_to_polyline(T.C_in, path, bubble, points_per_edge))
    logger.info("traced {} intrinsic edges".format(len(polylines)))
    return polylines

# nodes and edges of a curve network made of polylines
def polylines_to_curve_network(polylines):
    if len(polylines) == 0:
        return np.zeros((0,3)), np.zeros((0,2), dtype=int)
    nodes = np.concatenate(polylines)
    edges = []
    offset = 0
    for p in polylines:
        idx = offset + np.arange(len(p))
        edges.append(np.stack((idx[:-1], idx[1:]), axis=1))
        offset += len(p)
    return nodes, np.concatenate(edges)

def generate_visualization(T, cover, params, progress=False):
    """
    Rounded surface and traced intrinsic edges for the given parameters. The cover and the
    triangulation are not modified.

    param[in] SignpostTriangulation T: intrinsic triangulation of the cover
    param[in] TuftedCover cover: cover whose connectivity is T.C_in
    param[in] VisualizationParams params: visualization parameters
    return np.array V, F: rounded triangle soup
    return list polylines: one (k x 3) polyline per intrinsic edge
    """
    V, F = subdivide_rounded(cover.C, cover.v3d, params.subdiv_level, params.bubble_scale)
    bubble = BubbleOffset(cover.C, cover.v3d, params.bubble_scale)
    polylines = trace_intrinsic_edges(T, bubble, params.points_per_edge, progress=progress)
    return V, F, polylines
