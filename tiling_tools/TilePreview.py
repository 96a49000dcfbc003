# tiling_tools/TilePreview.py
"""
Raster preview of a kite/dart tiling.
Tile corners follow canvas conventions (y grows downward, angle 0 points up).
"""
import logging
import math

from PIL import Image, ImageDraw

from tiling_tools.Geometry import PHI

DEFAULT_KITE_COLOR = (205, 255, 255)
DEFAULT_DART_COLOR = (0, 0, 255)
DEFAULT_BACKGROUND = (0, 0, 0)
DEFAULT_STROKE = (0, 0, 0)

logger = logging.getLogger('TilePreview')


def tile_vertices(tile, size):
    """Four corners of a tile as complex numbers, starting at its anchor."""
    x, y, ang = tile.x, tile.y, tile.angle
    left = complex(x + size * math.sin(math.radians(36 + ang)),
                   y - size * math.cos(math.radians(36 + ang)))
    right = complex(x - size * math.sin(math.radians(36 - ang)),
                    y - size * math.cos(math.radians(36 - ang)))
    reach = size if tile.is_kite else size / PHI
    tip = complex(x + reach * math.sin(math.radians(ang)),
                  y - reach * math.cos(math.radians(ang)))
    return [complex(x, y), left, tip, right]


def shade(color, metric, depth=0.5):
    """Darken a color toward the outside of the tiling (metric 0 -> 10)."""
    factor = 1.0 - depth * min(max(metric, 0.0), 10.0) / 10.0
    return tuple(max(0, min(255, int(c * factor))) for c in color)


def render_tiling(state, width=800, height=800, kite_color=DEFAULT_KITE_COLOR,
                  dart_color=DEFAULT_DART_COLOR, background=DEFAULT_BACKGROUND,
                  stroke=DEFAULT_STROKE, padding=0.05):
    """Draw every tile of a TilingState into a new RGB image, fitted to the frame."""
    image = Image.new('RGB', (width, height), background)
    if not state.tiles:
        return image

    polygons = [tile_vertices(tile, state.size) for tile in state.tiles]
    xs = [v.real for poly in polygons for v in poly]
    ys = [v.imag for poly in polygons for v in poly]
    extent = max(max(xs) - min(xs), max(ys) - min(ys)) or 1.0
    scale = min(width, height) * (1 - 2 * padding) / extent
    cx = (max(xs) + min(xs)) / 2
    cy = (max(ys) + min(ys)) / 2

    draw = ImageDraw.Draw(image)
    line_width = max(1, int(state.size * scale / 50))
    for tile, poly in zip(state.tiles, polygons):
        points = [((v.real - cx) * scale + width / 2, (v.imag - cy) * scale + height / 2)
                  for v in poly]
        base = kite_color if tile.is_kite else dart_color
        draw.polygon(points, fill=shade(base, tile.metric), outline=stroke)
        if line_width > 1:
            draw.line(points + points[:1], fill=stroke, width=line_width)

    logger.debug(f"Rendered {len(polygons)} tiles at scale {scale:.3f}")
    return image
