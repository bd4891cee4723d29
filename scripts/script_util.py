import os, sys
script_dir = os.path.dirname(__file__)
module_dir = os.path.join(script_dir, '..', 'py')
sys.path.append(module_dir)
import argparse
import igl
import numpy as np
import logging
from tufted_impl.mollify import DEFAULT_MOLLIFY_FACTOR
from viz_impl.visualization import VisualizationParams


class OutputWriteError(OSError):
    pass


def add_mesh_arguments(parser):
    parser.add_argument("mesh",                  help="a surface mesh file, any format igl.read_triangle_mesh reads")

def add_algorithm_arguments(parser):
    parser.add_argument("--mollify_factor",      help="amount of intrinsic mollification, relative to the mean edge length",
                                                     type=float, default=DEFAULT_MOLLIFY_FACTOR)

def add_output_arguments(parser):
    parser.add_argument("--output_prefix",       help="prefix prepended to output file paths",
                                                     default="tufted_")
    parser.add_argument("--write_laplacian",     help="write the weak Laplacian to <prefix>laplacian.spmat",
                                                     action="store_true")
    parser.add_argument("--write_mass",          help="write the lumped mass matrix to <prefix>lumped_mass.spmat",
                                                     action="store_true")
    parser.add_argument("--log_path",            help="log file, logs to the terminal if not given")

def add_visualization_arguments(parser):
    params = VisualizationParams()
    parser.add_argument("--gui",                 help="open a polyscope window with the bubble cover and intrinsic edges",
                                                     action="store_true")
    parser.add_argument("--subdiv_level",        help="subdivision rounds of the bubble surface",
                                                     type=int, default=params.subdiv_level)
    parser.add_argument("--bubble_scale",        help="bubble scale in [0, 0.5]",
                                                     type=float, default=params.bubble_scale)
    parser.add_argument("--points_per_edge",     help="points per triangle crossed by an intrinsic edge",
                                                     type=int, default=params.points_per_edge)

def generate_parser(description='Build the tufted Laplacian of a mesh.'):
    parser = argparse.ArgumentParser(description=description)
    add_mesh_arguments(parser)
    add_algorithm_arguments(parser)
    add_output_arguments(parser)
    add_visualization_arguments(parser)
    return parser

def generate_visualization_params(args):
    return VisualizationParams(subdiv_level=args['subdiv_level'],
                               bubble_scale=args['bubble_scale'],
                               points_per_edge=args['points_per_edge'])

def get_logger(log_path=None, level=logging.INFO):
    # Create the logging handler, a file if a path is given
    logger = logging.getLogger()
    logger.setLevel(level)
    if log_path is not None:
        if os.path.exists(log_path):
            os.remove(log_path)
        handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)

    # add handler to logger object
    logger.addHandler(handler)

    return logger

def clean_polygon_soup(v, polygons):
    """
    Triangulate polygons by fans, drop triangles with repeated vertices and remove
    unreferenced vertices.

    param[in] np.array v: (n_v x 3) vertex positions
    param[in] list polygons: faces as lists of vertex indices, or an (n_f x k) array
    return np.array: vertex positions
    return np.array: (n_f x 3) triangles
    """
    tris = []
    for poly in polygons:
        for k in range(1, len(poly)-1):
            tris.append([poly[0], poly[k], poly[k+1]])
    f = np.array(tris, dtype=int).reshape(-1, 3)
    keep = (f[:,0] != f[:,1]) & (f[:,1] != f[:,2]) & (f[:,2] != f[:,0])
    if not keep.all():
        logging.getLogger(__name__).info("dropped {} faces with repeated vertices".format(np.sum(~keep)))
    f = f[keep]
    if len(f) == 0:
        raise ValueError("mesh has no valid faces")
    v_clean, f_clean, _, _ = igl.remove_unreferenced(np.asarray(v, dtype=float), f)
    return v_clean, f_clean

def save_sparse_matrix(path, M):
    """
    Write a sparse matrix as one "row col value" triple per line, 1-based, 16 significant digits.

    param[in] path: output file path
    param[in] M: scipy sparse matrix
    """
    logging.getLogger(__name__).info("Writing sparse matrix to: {}".format(path))
    M = M.tocoo()
    try:
        with open(path, 'wt') as f:
            for i, j, val in zip(M.row, M.col, M.data):
                f.write("{} {} {:.16g}\n".format(i+1, j+1, val))
    except OSError as e:
        raise OutputWriteError("failed to write output file {}: {}".format(path, e)) from e
