import logging
import numpy as np
import polyscope as ps
import polyscope.imgui as psim

from viz_impl.visualization import *

logger = logging.getLogger(__name__)

teal = np.array([0.290,0.686,0.835])
orange = np.array([0.906,0.639,0.224])
off_white = np.array([0.95,0.95,0.92])

def register_input_mesh(v, f):
    ps_mesh = ps.register_surface_mesh("input mesh", v, f, smooth_shade=False, material="wax",
                                       color=off_white, edge_width=1., enabled=False)
    return ps_mesh

def register_visualization(V, F, polylines, edge_radius=0.001):
    ps_bubble = ps.register_surface_mesh("tufted cover", V, F, smooth_shade=True, material="wax",
                                         color=teal)
    nodes, edges = polylines_to_curve_network(polylines)
    ps_edges = ps.register_curve_network("intrinsic edges", nodes, edges, radius=edge_radius,
                                         color=orange)
    return ps_bubble, ps_edges

def make_visualization_callback(T, cover, params):
    """
    Polyscope user callback with controls for the visualization parameters; the rounded surface
    and intrinsic edges are regenerated from T and the cover when the parameters change.

    param[in] SignpostTriangulation T: intrinsic triangulation
    param[in] TuftedCover cover: cover of the input mesh
    param[in] VisualizationParams params: initial parameters
    return function: callback for ps.set_user_callback
    """
    state = {'params': params}

    def callback():
        p = state['params']
        _, subdiv_level = psim.InputInt("subdivision level", p.subdiv_level)
        _, bubble_scale = psim.SliderFloat("bubble scale", p.bubble_scale, v_min=0., v_max=0.5)
        _, points_per_edge = psim.InputInt("points per edge", p.points_per_edge)
        # edited values are clamped to the valid ranges and kept until the next regeneration
        state['params'] = VisualizationParams(max(subdiv_level, 0), min(max(bubble_scale, 0.), 0.5),
                                              max(points_per_edge, 0))
        if psim.Button("regenerate"):
            logger.info("regenerating visualization with {}".format(state['params']))
            V, F, polylines = generate_visualization(T, cover, state['params'])
            register_visualization(V, F, polylines)
    return callback

def show_visualization(v, f, T, cover, params):
    ps.init()
    ps.set_ground_plane_mode("none")
    register_input_mesh(v, f)
    V, F, polylines = generate_visualization(T, cover, params, progress=True)
    register_visualization(V, F, polylines)
    ps.reset_camera_to_home_view()
    ps.set_user_callback(make_visualization_callback(T, cover, params))
    ps.show()
