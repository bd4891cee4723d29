# Tufted cover pipeline: cover construction, mollification and intrinsic Delaunay flips
#
# Each stage runs inside pipeline_stage(name); a failure aborts the remaining stages and is
# re-raised as PipelineError naming the stage.

import logging
import time
import numpy as np
from contextlib import contextmanager

from tufted_impl.cover import *
from tufted_impl.mollify import *
from tufted_impl.signpost import *
from tufted_impl.delaunay import *
from tufted_impl.laplacian import *

logger = logging.getLogger(__name__)

class PipelineError(RuntimeError):
    def __init__(self, stage, cause):
        self.stage = stage
        self.cause = cause
        super().__init__("{} failed: {}".format(stage, cause))

@contextmanager
def pipeline_stage(name):
    logger.info("{} ...".format(name))
    start = time.time()
    try:
        yield
    except PipelineError:
        raise
    except Exception as e:
        logger.error("{} failed: {}".format(name, e))
        raise PipelineError(name, e) from e
    logger.info("{} done in {:.3f}s".format(name, time.time() - start))

def generate_vertex_separated_tufted_cover(v, f, mollify_factor=DEFAULT_MOLLIFY_FACTOR):
    """
    Build the tufted cover of a mesh and its intrinsic Delaunay signpost triangulation.

    The input arrays are copied and never modified.

    param[in] np.array v: (n_v x 3) vertex positions
    param[in] np.array f: (n_f x 3) triangles, possibly non-manifold or with boundary
    param[in] float mollify_factor: relative mollification margin, 0 to skip mollification
    return TuftedCover cover: cover with mollified lengths
    return SignpostTriangulation T: intrinsic Delaunay triangulation of the cover
    """
    v = np.array(v, dtype=float)
    f = np.array(f, dtype=int)
    with pipeline_stage("tufted cover"):
        cover = build_tufted_cover(v, f)
    with pipeline_stage("mollification"):
        cover.l, _ = mollify_lengths(cover.C, cover.l, mollify_factor)
    with pipeline_stage("signpost triangulation"):
        T = build_signpost_triangulation(cover.C, cover.l)
    with pipeline_stage("Delaunay flips"):
        make_delaunay(T)
    return cover, T

# weak Laplacian and lumped mass of the input vertices from the Delaunay triangulation of the cover
def tufted_laplacian_and_mass(cover, T, n_v):
    with pipeline_stage("Laplacian assembly"):
        L = cotan_laplacian(T.C, T.l, cover.vtx_reindex, n_v, cover.n_sheets)
        M = lumped_mass(T.C, T.l, cover.vtx_reindex, n_v, cover.n_sheets)
    return L, M

def build_tufted_laplacian(v, f, mollify_factor=DEFAULT_MOLLIFY_FACTOR):
    """
    Weak Laplacian and lumped mass of an arbitrary triangle mesh, assembled on the intrinsic
    Delaunay triangulation of its tufted cover.

    param[in] np.array v: (n_v x 3) vertex positions
    param[in] np.array f: (n_f x 3) triangles, possibly non-manifold
    param[in] float mollify_factor: relative mollification margin, 0 to skip mollification
    return scipy.sparse.csr_matrix L: (n_v x n_v) Laplacian
    return scipy.sparse.csr_matrix M: (n_v x n_v) lumped mass matrix
    """
    cover, T = generate_vertex_separated_tufted_cover(v, f, mollify_factor)
    return tufted_laplacian_and_mass(cover, T, len(v))
