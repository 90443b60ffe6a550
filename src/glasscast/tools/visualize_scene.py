import argparse

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import LineCollection

from glasscast import constants
from glasscast.geometry import direction_from_degrees
from glasscast.scene import load_world
from glasscast.sweep import DEFAULT_SWEEP, sweep_angles
from glasscast.tracing import DEFAULT_SETTINGS, trace_ray_arrays


def wall_display_colors(world):
    """
    Matplotlib RGB for each wall.

    A wall's color is what it removes, so a ray that crossed it looks like
    white minus that color.
    """
    if not world.walls:
        return np.zeros((0, 3))
    return (255 - world.wall_colors[:, :3]) / 255.0


def plot_scene(world, canvas_size, trace_settings=DEFAULT_SETTINGS, sweep_settings=DEFAULT_SWEEP,
               ray_every=10, path=None):
    """
    Debug plot: walls, the light and every `ray_every`-th traced ray.

    Rays are drawn in their final carried color, ending where they leave
    the canvas.
    """
    width, height = canvas_size
    fig, ax = plt.subplots(figsize=(8, 8 * height / width))
    ax.set_facecolor("black")

    origin = world.light.position
    angles = sweep_angles(sweep_settings)[::ray_every]
    for direction in direction_from_degrees(angles):
        pixels, colors = trace_ray_arrays(origin, direction, canvas_size, world.light.color,
                                          world, trace_settings)
        if len(pixels) < 2:
            continue
        segments = np.stack([pixels[:-1], pixels[1:]], axis=1)
        lc = LineCollection(segments, colors=colors[1:, :3] / 255.0, linewidths=0.6)
        ax.add_collection(lc)

    if world.walls:
        wall_segments = np.stack([world.wall_starts, world.wall_ends], axis=1)
        ax.add_collection(LineCollection(wall_segments, colors=wall_display_colors(world), linewidths=2.5))

    ax.plot(origin[0], origin[1], marker="*", markersize=14, color="yellow",
            markeredgecolor="orange", label="Light")
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)  # pixel space, y down
    ax.set_aspect("equal")
    ax.set_title(f"{len(world.walls)} walls, {len(angles)} of {len(sweep_angles(sweep_settings))} rays")
    ax.legend(loc="upper right")

    if path is not None:
        fig.savefig(path, dpi=120)
        plt.close(fig)
        print(f"Saved scene plot to {path}")
    return fig


if __name__ == "__main__":
    matplotlib.use("Agg")
    parser = argparse.ArgumentParser(description="Plot a glasscast scene with sample rays")
    parser.add_argument("world")
    parser.add_argument("--width", type=int, default=constants.DEFAULT_CANVAS_WIDTH)
    parser.add_argument("--height", type=int, default=constants.DEFAULT_CANVAS_HEIGHT)
    parser.add_argument("--every", type=int, default=10, help="Plot every n-th ray")
    parser.add_argument("--out", default="scene_plot.png")
    args = parser.parse_args()

    plot_scene(load_world(args.world), (args.width, args.height), ray_every=args.every, path=args.out)
