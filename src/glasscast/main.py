import argparse
import logging
import sys
import time

from glasscast import constants
from glasscast.logging_setup import setup_default_logging
from glasscast.rendering import LightRenderer, save_frame
from glasscast.scene import SceneFormatError, load_world
from glasscast.sweep import SweepSettings
from glasscast.tracing import ProbeMode, TraceSettings

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="glasscast",
                                     description="Cast light from a point source through a 2D scene of walls")
    parser.add_argument("world", help="Path to the world JSON file")
    parser.add_argument("--width", type=int, default=constants.DEFAULT_CANVAS_WIDTH, help="Canvas width in pixels")
    parser.add_argument("--height", type=int, default=constants.DEFAULT_CANVAS_HEIGHT, help="Canvas height in pixels")
    parser.add_argument("--out", default="output/glasscast.png", help="Where to save the rendered frame")
    parser.add_argument("--angle-start", type=int, default=constants.DEFAULT_ANGLE_START, help="First sweep angle (degrees)")
    parser.add_argument("--angle-stop", type=int, default=constants.DEFAULT_ANGLE_STOP, help="Sweep stop angle, exclusive (degrees)")
    parser.add_argument("--angle-step", type=int, default=constants.DEFAULT_ANGLE_STEP, help="Degrees between rays")
    parser.add_argument("--step-size", type=float, default=constants.DEFAULT_STEP_SIZE, help="Distance between ray samples")
    parser.add_argument("--probe", choices=[m.value for m in ProbeMode], default=ProbeMode.SEGMENT.value,
                        help="Wall test used at each sample")
    parser.add_argument("--probe-width", type=float, default=constants.DEFAULT_PROBE_WIDTH, help="Probe extent / distance threshold")
    parser.add_argument("--nearest-first", action="store_true", help="Resolve overlapping walls nearest-to-light first")
    parser.add_argument("--plot", metavar="PATH", help="Also save a matplotlib debug plot of the scene")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio UI")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_default_logging(args.log_level)

    try:
        world = load_world(args.world)
        trace_settings = TraceSettings(step_size=args.step_size, probe=args.probe,
                                       probe_width=args.probe_width)
        sweep_settings = SweepSettings(angle_start=args.angle_start, angle_stop=args.angle_stop,
                                       angle_step=args.angle_step, nearest_wall_first=args.nearest_first)
        renderer = LightRenderer(world, args.width, args.height, trace_settings, sweep_settings)
    except SceneFormatError as exc:
        logger.error("Cannot load world: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("Invalid settings: %s", exc)
        return 2

    if args.ui:
        from glasscast.ui import CSS, create_ui
        logger.info("Launching UI...")
        demo = create_ui(renderer)
        demo.launch(css=CSS)
        return 0

    t0 = time.time()
    frame = renderer.render()
    logger.info("Rendered %dx%d frame in %.2fs", args.width, args.height, time.time() - t0)
    save_frame(frame, args.out)

    if args.plot:
        from glasscast.tools.visualize_scene import plot_scene
        plot_scene(world, (args.width, args.height), trace_settings, sweep_settings, path=args.plot)
    return 0


def run_ui():
    """Entry point for glasscast-ui command."""
    return main(sys.argv[1:] + ["--ui"])


if __name__ == "__main__":
    raise SystemExit(main())
