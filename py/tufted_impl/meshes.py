import numpy as np

def generate_tet():
    """
    Generate tetrahedron mesh with vertices at the origin and the three elementary basis vectors.
    The mesh is closed and consistently oriented.

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[0,0,0],
                [1,0,0],
                [0,1,0],
                [0,0,1]], dtype=float)
    f = np.array([[0,2,1],
                [0,1,3],
                [1,2,3],
                [0,3,2]], dtype=int)

    return v, f

def generate_tri():
    """
    Generate single equilateral triangle mesh.

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[1,0,0],
                 [0,1,0],
                 [0,0,1]], dtype=float)
    f = np.array([[0,1,2],], dtype=int)

    return v, f

def generate_square():
    """
    Generate unit square split into two triangles along the diagonal from (0,0) to (1,1).

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[0,0,0],
                  [1,0,0],
                  [1,1,0],
                  [0,1,0]], dtype=float)
    f = np.array([[0,1,2],
                  [0,2,3]], dtype=int)

    return v, f

def generate_nondelaunay_quad():
    """
    Generate quadrilateral mesh with nondelaunay diagonal from (sqrt(3),0) to (-sqrt(3),0).

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[np.sqrt(3),0,0],
                  [0,1,0],
                  [-np.sqrt(3),0,0],
                  [0,-1,0]])
    f = np.array([[0,1,2],
                  [0,2,3]], dtype=int)

    return v, f

def generate_nonconvex_quad():
    """
    Generate quadrilateral mesh that is not convex at the diagonal endpoint (1,0).

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[1,0,0],
                  [2,1,0],
                  [-1,0,0],
                  [2,-1,0]], dtype=float)
    f = np.array([[0,1,2],
                  [0,2,3]], dtype=int)

    return v, f

def generate_delaunay_quad():
    """
    Generate quadrilateral mesh with delaunay diagonal from (0,1) to (0,-1).

    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[np.sqrt(3),0,0],
                  [0,1,0],
                  [-np.sqrt(3),0,0],
                  [0,-1,0]])
    f = np.array([[0,1,3],
                  [1,2,3]], dtype=int)

    return v, f

def generate_right_triangle(height, width):
    """
    Generate single right triangle mesh with the given leg lengths.

    param[in] height, width: triangle leg lengths
    return np.array: vertex positions
    return np.array: face indices
    """
    v = np.array([[0,0,0],
                 [width,0,0],
                 [0,height,0]], dtype=float)
    f = np.array([[0,1,2],], dtype=int)

    return v, f

def generate_sliver(short=1e-8):
    """
    Generate a thin triangle with edge lengths 1, 1 and short.

    param[in] float short: length of the short edge
    return np.array: vertex positions
    return np.array: face indices
    """
    h = np.sqrt(1 - (short/2)**2)
    v = np.array([[0,0,0],
                  [short,0,0],
                  [short/2,h,0]], dtype=float)
    f = np.array([[0,1,2],], dtype=int)

    return v, f

def generate_fin(n_fins=3):
    """
    Generate n_fins triangles sharing the edge from (0,0,0) to (0,0,1), spread uniformly
    around the edge. The shared edge is non-manifold for n_fins > 2.

    param[in] int n_fins: number of triangles
    return np.array: vertex positions
    return np.array: face indices
    """
    angles = 2*np.pi*np.arange(n_fins)/n_fins
    tips = np.stack((np.cos(angles), np.sin(angles), 0.5*np.ones(n_fins)), axis=1)
    v = np.concatenate((np.array([[0,0,0],[0,0,1]], dtype=float), tips))
    f = np.stack((np.zeros(n_fins), np.ones(n_fins), 2 + np.arange(n_fins)), axis=1).astype(int)

    return v, f

def generate_bowtie_tets():
    """
    Generate two closed tetrahedra sharing the vertex at the origin, the second one mirrored
    through it. The shared vertex is non-manifold.

    return np.array: vertex positions
    return np.array: face indices
    """
    v_tet, f_tet = generate_tet()
    v = np.concatenate((v_tet, -v_tet[1:]))
    # mirroring reverses orientation, so faces of the second copy are reversed
    reindex = np.array([0, 4, 5, 6])
    f = np.concatenate((f_tet, reindex[f_tet[:,[0,2,1]]]))

    return v, f

def generate_del_rect(n):
    """
    Generate Delaunay rectangle mesh

    param[in] int n: number of grid points along the x axis
    return np.array: vertex positions
    return np.array: face indices
    """
    dx = 1/(n-1)/2
    dy = 1/(n-1)

    # Generate vertices
    grid_line = np.zeros((n,3))
    grid_line[:,0] = np.linspace(0,1,n)
    strip_lines = np.concatenate((grid_line,
                                  np.array([[0,dy,0],]),
                                  grid_line+np.array([dx,dy,0])))
    strip_lines[-1,0] = 1
    v = np.concatenate((strip_lines, grid_line+np.array([0,2*dy,0])))

    # Generate faces
    f_0 = np.stack((np.arange(n-1),np.arange(1,n),np.arange(n+1,2*n))).T
    f_1 = np.stack((np.arange(n,2*n),np.arange(0,n),np.arange(n+1,2*n+1))).T
    f_2 = np.stack((np.arange(n,2*n),np.arange(n+1,2*n+1),np.arange(2*n+1,3*n+1))).T
    f_3 = np.stack((np.arange(2*n+1,3*n),np.arange(n+1,2*n),np.arange(2*n+2,3*n+1))).T
    f=np.concatenate((f_0,f_1,f_2,f_3))

    return v,f

def generate_sheared_grid(n_x, n_y, shear=2.3, height=0.8, bump=0.0):
    """
    Generate grid mesh of the lattice with basis (1,0) and (shear,height). Each grid cell
    (a,b), (a+1,b), (a+1,b+1), (a,b+1) is split along the diagonal from (a,b) to (a+1,b+1), which
    gives long thin triangles. For the default parameters the Delaunay edges of the lattice are
    (1,0), (shear-2,height) and (shear-3,height), and the second one crosses three grid edges.

    param[in] int n_x, n_y: number of grid points in each direction
    param[in] float shear, height: second lattice vector
    param[in] float bump: amplitude of a height field z = bump*sin(x)*sin(y), 0 for a planar grid
    return np.array: vertex positions
    return np.array: face indices
    """
    a, b = np.meshgrid(np.arange(n_x), np.arange(n_y), indexing='ij')
    a = a.flatten(); b = b.flatten()
    x = a + shear*b
    y = height*b
    v = np.stack((x, y, bump*np.sin(x)*np.sin(y)), axis=1).astype(float)

    # vertex (a,b) has index a*n_y + b
    def idx(a, b):
        return a*n_y + b
    a, b = np.meshgrid(np.arange(n_x-1), np.arange(n_y-1), indexing='ij')
    a = a.flatten(); b = b.flatten()
    f_0 = np.stack((idx(a,b), idx(a+1,b), idx(a+1,b+1)), axis=1)
    f_1 = np.stack((idx(a,b), idx(a+1,b+1), idx(a,b+1)), axis=1)
    f = np.concatenate((f_0, f_1)).astype(int)

    return v, f

def generate_sheared_torus(n_x, n_y, shear=2.3, height=0.8):
    """
    Generate flat torus with the connectivity of generate_sheared_grid, made periodic in both
    directions. The torus has no embedding, its metric is given by the lattice lengths.

    param[in] int n_x, n_y: number of grid points in each direction, at least 3
    param[in] float shear, height: second lattice vector
    return np.array: (n_f x 3) face indices
    return np.array: (n_f x 3) lengths, entry k of face i for the edge from f[i,k] to f[i,(k+1)%3]
    """
    a, b = np.meshgrid(np.arange(n_x), np.arange(n_y), indexing='ij')
    a = a.flatten(); b = b.flatten()
    v00 = a*n_y + b
    v10 = ((a+1)%n_x)*n_y + b
    v11 = ((a+1)%n_x)*n_y + (b+1)%n_y
    v01 = a*n_y + (b+1)%n_y
    f = np.concatenate((np.stack((v00, v10, v11), axis=1),
                        np.stack((v00, v11, v01), axis=1))).astype(int)

    l_a = 1.0
    l_b = np.hypot(shear, height)
    l_ab = np.hypot(1 + shear, height)
    n = len(v00)
    lengths = np.concatenate((np.tile([l_a, l_b, l_ab], (n, 1)),
                              np.tile([l_ab, l_a, l_b], (n, 1))))

    return f, lengths
