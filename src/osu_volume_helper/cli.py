from argparse import ArgumentParser, RawDescriptionHelpFormatter
import logging
from pathlib import Path

from . import osu_format, utils, __version__
from .utils import logger
from .volume_curve import DEFAULT_MUTE_THRESHOLD, VolumeCurve

def get_parser():
    parser = ArgumentParser(
        formatter_class=RawDescriptionHelpFormatter,
        prog=f"python3 -m {__package__}.{Path(__file__).stem}",
        description='\n'.join([
            "Copy the volume curve from one difficulty of an osu! beatmap to other difficulties in the set.",
            "",
            "Red lines keep their BPM, all timing points keep their hitsounds and kiai.",
            "Green lines are added where the source changes the volume but the target has no timing point.",
            f"Timing points with a volume at or below the mute threshold (default: {DEFAULT_MUTE_THRESHOLD}%) are left alone,",
            "\tsince those are usually used to silence slider ends.",
        ]),
        epilog=f"Version: {__version__}",
    )
    parser.add_argument("source", type=Path, help="The .osu file to copy the volume curve from.")
    parser.add_argument("dest", type=Path, nargs="?", help="Optionally specify a specific .osu file to copy the volume curve to. If not present this defaults to all other difficulties in the beatmapset.")
    parser.add_argument("-t", "--mute-threshold", type=utils.parse_volume, default=DEFAULT_MUTE_THRESHOLD, metavar="VOLUME", help=f"Volume at or below which timing points count as muted. Default: {DEFAULT_MUTE_THRESHOLD}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    return parser

def abort(reason: str):
    logger.error(reason)
    exit(1)

def find_targets(source: Path, dest: Path|None) -> list[Path]:
    if dest is not None:
        return [dest]
    source_path = source.resolve()
    targets = []
    for sibling in osu_format.find_siblings(source):
        if sibling == source_path:
            logger.debug(f"Skipping source {sibling.name}")
            continue
        targets.append(sibling)
    return targets

def main(options):
    try:
        targets = find_targets(options.source, options.dest)
        if not targets:
            abort(f"No other difficulties found next to {options.source}, try specifying a target file")
        volume_curve = VolumeCurve.load(options.source, options.mute_threshold)
        logger.info(f"Loaded {len(volume_curve)} volume changes from {options.source.name}")
        for p in volume_curve:
            logger.debug(f"\t{utils.pretty_point(p)}")
        for target in targets:
            volume_curve.write(target, options.mute_threshold)
            logger.info(f"Wrote volume curve to {target.name}")
    except (osu_format.FileAccessError, osu_format.NoParentDirectoryError) as err:
        abort(str(err))
    except osu_format.MalformedSectionError as mse:
        abort(f"{mse}\n\tIs this really a .osu file?")
    logger.info(f"Done: {utils.pretty_list([t.name for t in targets])}")

def entrypoint(args: list[str]|None = None):
    options = get_parser().parse_args(args)
    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    main(options)

if __name__ == "__main__":
    entrypoint()
