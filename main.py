# main.py

import sys
import json
import logging

import numpy as np
import pygame

import constants
import logger_setup
from accumulator import Histogram
from errors import RendererError
from geometry import Bounds
from pipeline import RenderPipeline
from render_options import RenderOptions
from renderer import Canvas, write_png
from sampler import Sampler
from scene import generate_mirrors
from tracer import TraceOptions, Tracer

# Get the application's dedicated logger
logger = logging.getLogger(constants.LOGGER_NAME)


def load_config(config_path: str) -> dict:
    with open(config_path, 'r') as f:
        return json.load(f)


def render(config: dict, seed: int, filename: str):
    """
    Renders one image: seeds a fresh generator, scatters mirrors, runs every
    launch through the pipeline and writes the tone-mapped histogram.
    """
    ro = RenderOptions.from_config(config.get('render', {}))
    scene_config = config.get('scene', {})
    trace_config = config.get('trace', {})
    tone_config = config.get('tone_map', {})
    pipeline_config = config.get('pipeline', {})

    rng = np.random.default_rng(seed)
    logger.info(f"Rendering {filename} with seed {seed}: {ro}")

    bounds = Bounds.around_image(ro.width, ro.height, trace_config.get('bounds_margin', constants.BOUNDS_MARGIN))
    trace_options = TraceOptions.from_config(trace_config, bounds=bounds)
    mirrors = generate_mirrors(
        rng, ro.width, ro.height,
        number_of_lines=scene_config.get('number_of_lines', constants.NUMBER_OF_LINES),
        line_length=scene_config.get('line_length', constants.LINE_LENGTH),
        one_way=scene_config.get('one_way', constants.ONE_WAY_MIRRORS),
    )

    tracer = Tracer(mirrors, trace_options)
    sampler = Sampler.from_config(config.get('sampler', {}), trace_options)
    launch_height = scene_config.get('launch_height')
    pipeline = RenderPipeline(
        tracer, sampler, ro,
        launch_height=ro.height if launch_height is None else launch_height,
        workers=pipeline_config.get('workers'),
        result_timeout=pipeline_config.get('result_timeout', constants.RESULT_TIMEOUT),
    )
    histogram = Histogram(ro.width, ro.height)

    with logger_setup.log_duration("total time"):
        with logger_setup.log_duration("rendering"), Canvas(ro.width, ro.height) as canvas:
            stats = pipeline.render(canvas, histogram)

        with logger_setup.log_duration("exporting"):
            image = histogram.tone_map(
                exposure=tone_config.get('exposure', constants.EXPOSURE),
                gamma=tone_config.get('gamma', constants.GAMMA),
            )
            write_png(image, ro.width, ro.height, filename)

    return stats


def main(argv=None):
    """
    Main function to render every configured image.
    Returns the process exit code.
    """
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else 'config.json'

    # --- Setup ---
    logger_setup.setup_logging(config_path)
    config = load_config(config_path)
    output_config = config.get('output', {})

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    pygame.init()
    try:
        for i in range(output_config.get('images', 1)):
            # one generator per image, seeded master_seed + i
            seed = config['master_seed'] + i
            filename = output_config.get('pattern', constants.OUTPUT_PATTERN).format(index=i)
            render(config, seed, filename)
            logger.info(f"finished {filename}")
    except RendererError as e:
        logger.error(f"Render failed: {e}")
        return 1
    finally:
        pygame.quit()

    logger.info("Application shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
