from .KiteDartTile import KiteDartTile, KITE, DART
from .SubstitutionTiling import SubstitutionTiling, TilingState, TilingCache, is_duplicate
from .IsohedralOracle import EdgeShape, TilingDescriptor, Placement, IsohedralOracle, TilingLibrary
from .LatticeTiling import LatticeTiling, LatticeLibrary
from .OutlineBuilder import OutlineBuilder, build_outline
from .Triangulator import triangulate, triangulate_tile
from .ParameterPresets import interpolated_params, random_params, resolve_tiling_index
from .MeshAssembler import MeshAssembler, MeshBuffer
from .SurfaceBuilder import TilingSurfaceBuilder, RegenerationLimiter, room_surfaces
from .TilePreview import render_tiling, tile_vertices
from .Settings import Settings, initialize_config

__all__ = ['KiteDartTile', 'KITE', 'DART',
           'SubstitutionTiling', 'TilingState', 'TilingCache', 'is_duplicate',
           'EdgeShape', 'TilingDescriptor', 'Placement', 'IsohedralOracle', 'TilingLibrary',
           'LatticeTiling', 'LatticeLibrary',
           'OutlineBuilder', 'build_outline',
           'triangulate', 'triangulate_tile',
           'interpolated_params', 'random_params', 'resolve_tiling_index',
           'MeshAssembler', 'MeshBuffer',
           'TilingSurfaceBuilder', 'RegenerationLimiter', 'room_surfaces',
           'render_tiling', 'tile_vertices',
           'Settings', 'initialize_config']
