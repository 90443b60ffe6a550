import dataclasses
import functools

import gradio as gr

from .rendering import LightRenderer

# Dark canvas around the frame; no fade while the next sweep renders.
CSS = """
#output_img { background-color: #000 !important; border: none !important; }
#output_img img { object-fit: contain; image-rendering: pixelated; }
#output_img .pending { opacity: 1 !important; }
"""


def create_ui(renderer):
    """
    Interactive viewer. The x/y sliders are the light-position feed; they
    are disabled when the scene's light is fixed.
    """
    world = renderer.world
    light = world.light

    @functools.lru_cache(maxsize=8)
    def renderer_for(angle_step, step_size):
        return LightRenderer(
            world, renderer.width, renderer.height,
            trace_settings=dataclasses.replace(renderer.trace_settings, step_size=step_size),
            sweep_settings=dataclasses.replace(renderer.sweep_settings, angle_step=int(angle_step)),
            background=renderer.background,
        )

    def render_frame(light_x, light_y, angle_step, step_size):
        r = renderer_for(int(angle_step), float(step_size))
        return r.render_image((light_x, light_y))

    with gr.Blocks(title="Glasscast") as demo:
        gr.Markdown("# Glasscast")
        gr.Markdown(f"Point light casting through {len(world.walls)} walls.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### 💡 Light")
                    light_x = gr.Slider(minimum=0, maximum=renderer.width, value=float(light.position[0]),
                                        label="Light X", interactive=not light.fixed)
                    light_y = gr.Slider(minimum=0, maximum=renderer.height, value=float(light.position[1]),
                                        label="Light Y", interactive=not light.fixed)
                with gr.Group():
                    gr.Markdown("### 🔦 Rays")
                    angle_slider = gr.Slider(minimum=1, maximum=15, step=1,
                                             value=renderer.sweep_settings.angle_step,
                                             label="Angle Step (degrees)", info="Fewer rays render faster")
                    step_slider = gr.Slider(minimum=0.25, maximum=2.0, step=0.25,
                                            value=renderer.trace_settings.step_size,
                                            label="Sample Step", info="Above the probe width thin walls leak")

            with gr.Column(scale=2):
                output_img = gr.Image(label="Light Field", interactive=False, elem_id="output_img")

        inputs = [light_x, light_y, angle_slider, step_slider]
        for input_comp in inputs:
            input_comp.change(fn=render_frame, inputs=inputs, outputs=output_img,
                              trigger_mode="always_last", show_progress="hidden")

        demo.load(fn=render_frame, inputs=inputs, outputs=output_img, show_progress="hidden")

    return demo
