# Script to build the tufted Laplacian of a mesh
#
# Reads a possibly non-manifold mesh, builds the intrinsic Delaunay triangulation of its tufted
# cover and writes the weak Laplacian and lumped mass matrices. With --gui, shows the inflated
# cover with the intrinsic edges traced over it.

import os, sys
script_dir = os.path.dirname(__file__)
module_dir = os.path.join(script_dir, '..', 'py')
sys.path.append(module_dir)
import igl
import script_util
from tufted_impl.pipeline import *


def tufted_laplacian(args):
    logger = script_util.get_logger(args['log_path'])

    # Load and clean mesh
    v, f = igl.read_triangle_mesh(args['mesh'])
    v, f = script_util.clean_polygon_soup(v, f)
    logger.info("loaded {} with {} vertices and {} faces".format(args['mesh'], len(v), len(f)))

    cover, T = generate_vertex_separated_tufted_cover(v, f, args['mollify_factor'])
    L, M = tufted_laplacian_and_mass(cover, T, len(v))

    # write output matrices, a failed write does not stop the others
    outputs = []
    if args['write_laplacian']:
        outputs.append((args['output_prefix'] + "laplacian.spmat", L))
    if args['write_mass']:
        outputs.append((args['output_prefix'] + "lumped_mass.spmat", M))
    for path, mat in outputs:
        try:
            script_util.save_sparse_matrix(path, mat)
        except script_util.OutputWriteError as e:
            logger.error(str(e))

    if args['gui']:
        from viz_impl.render import show_visualization
        params = script_util.generate_visualization_params(args)
        show_visualization(v, f, T, cover, params)

    return L, M


if __name__ == "__main__":
    # Parse arguments for the script
    parser = script_util.generate_parser()
    args = vars(parser.parse_args())

    tufted_laplacian(args)
