# tiling_generator.py
import argparse
import json
import logging
import os
import sys

from tiling_tools import (
    LatticeLibrary, MeshAssembler, SubstitutionTiling, TilingSurfaceBuilder,
    initialize_config, render_tiling,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger('Tiling_Generator')


def run_penrose(args, config_data):
    deflations = args.deflations if args.deflations is not None else config_data['deflations']
    size = args.size if args.size is not None else config_data['initial_size']

    state = SubstitutionTiling().generate(deflations, size)
    ratio = state.kind_ratio()
    logger.info(
        f"Depth {deflations}: {len(state.tiles)} tiles, final edge length {state.size:.5f}, "
        f"kite/dart ratio {'n/a' if ratio is None else f'{ratio:.4f}'}"
    )

    if args.json:
        records = [
            {'x': t.x, 'y': t.y, 'angle': t.angle, 'kind': t.kind, 'metric': t.metric}
            for t in state.tiles
        ]
        with open(args.json, 'w') as out:
            json.dump({'size': state.size, 'tiles': records}, out)
        logger.info(f"Wrote {len(records)} tiles to {args.json}")

    if args.png:
        image = render_tiling(state, args.image_size, args.image_size)
        image.save(args.png)
        logger.info(f"Wrote preview to {args.png}")
    return 0


def run_room(args, config_data):
    tiling_type = args.type if args.type is not None else config_data['tiling_type']
    curvature = args.curvature if args.curvature is not None else config_data['curvature']
    tile_scale = args.scale if args.scale is not None else config_data['tile_scale']

    builder = TilingSurfaceBuilder(
        library=LatticeLibrary(),
        assembler=MeshAssembler(color_mode=config_data['color_mode']),
        samples_per_edge=config_data['samples_per_edge'],
    )
    meshes = builder.build_room(tiling_type, config_data['room_width'], config_data['room_height'],
                                config_data['room_depth'], tile_scale, curvature)

    if args.out:
        os.makedirs(args.out, exist_ok=True)
    for name, mesh in meshes.items():
        logger.info(f"{name}: {mesh}")
        if args.out:
            mesh.save(os.path.join(args.out, f"{name}.npz"))
    return 0


def run_types(args, config_data):
    for index, name in enumerate(LatticeLibrary().type_names()):
        print(f"{index}: {name}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Procedural plane tiling generator")
    parser.add_argument('--config', default='config.ini', help='Path to the settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    commands = parser.add_subparsers(dest='command', required=True)

    penrose = commands.add_parser('penrose', help='Generate a kite/dart substitution tiling')
    penrose.add_argument('-d', '--deflations', type=int, help='Number of deflation steps')
    penrose.add_argument('-s', '--size', type=float, help='Initial edge length')
    penrose.add_argument('--json', help='Write tiles to this JSON file')
    penrose.add_argument('--png', help='Write a preview image to this file')
    penrose.add_argument('--image-size', type=int, default=800, help='Preview size in pixels')
    penrose.set_defaults(handler=run_penrose)

    room = commands.add_parser('room', help='Tile the six surfaces of a rectangular room')
    room.add_argument('-t', '--type', type=float, help='Tiling type value (fractional values morph)')
    room.add_argument('-c', '--curvature', type=float, help='Edge curvature 0-1')
    room.add_argument('-s', '--scale', type=float, help='World-space tile size')
    room.add_argument('-o', '--out', help='Directory for per-surface .npz buffers')
    room.set_defaults(handler=run_room)

    types = commands.add_parser('types', help='List the built-in tiling types')
    types.set_defaults(handler=run_types)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config_data = initialize_config(args.config)
        return args.handler(args, config_data)
    except Exception as e:
        logger.error(f"An error occurred: {e}")
        raise


if __name__ == '__main__':
    sys.exit(main())
