"""Procedural wiggle motion: animation parameters to per-frame transforms."""

import math
from typing import Callable, Iterator

from ..constants import BASE_AMPLITUDE_RATIO, FREQUENCY_BANDS, TERM_WEIGHTS
from .models import AnimationParameters, CanvasGeometry, PhaseSeed, Transform

UniformSource = Callable[[float, float], float]

TWO_PI = 2 * math.pi


def fit_canvas(source_size: tuple[int, int], params: AnimationParameters) -> CanvasGeometry:
    """
    Fit the source into ``target_max_dimension`` while keeping its aspect ratio.

    Images already smaller than the target keep their size.

    Args:
        source_size: Width and height of the source image
        params: Animation parameters snapshot

    Returns:
        Canvas size plus the scaled image footprint on it
    """
    width, height = source_size
    fit_scale = min(1.0, params.target_max_dimension / max(width, height, 1))
    return CanvasGeometry(
        width=max(1, round(width * fit_scale)),
        height=max(1, round(height * fit_scale)),
        fit_scale=fit_scale,
        scaled_width=width * fit_scale * params.image_scale,
        scaled_height=height * fit_scale * params.image_scale,
    )


def draw_phase_seed(uniform: UniformSource) -> PhaseSeed:
    """
    Draw the random motion character for one animation request.

    Each frequency comes from its own band of whole cycles per loop, so the
    three terms never coincide and the motion closes seamlessly at the wrap.
    The frequencies share no common factor, otherwise the wiggle would
    repeat within one loop.
    """
    phases = tuple(uniform(0.0, TWO_PI) for _ in range(3))
    cycles = [round(uniform(low, high)) for low, high in FREQUENCY_BANDS]
    while math.gcd(*cycles) > 1:
        cycles[-1] += 1
    frequencies = tuple(float(c) for c in cycles)
    return PhaseSeed(phases=phases, frequencies=frequencies)  # type: ignore[arg-type]


def iter_transforms(
    params: AnimationParameters,
    geometry: CanvasGeometry,
    seed: PhaseSeed,
) -> Iterator[Transform]:
    """Yield one transform per frame index, in order. Each call starts over."""
    amplitude_x = params.wiggle_intensity * BASE_AMPLITUDE_RATIO * geometry.width
    amplitude_y = params.wiggle_intensity * BASE_AMPLITUDE_RATIO * geometry.height
    max_x = geometry.max_offset_x
    max_y = geometry.max_offset_y
    scale_factor = params.image_scale * geometry.fit_scale

    for index in range(params.frame_count):
        time = (index / params.frame_count) * TWO_PI
        raw_x = amplitude_x * _wave(math.sin, time, seed.frequencies, seed.phases)
        # Vertical motion pairs each frequency with a different phase
        raw_y = amplitude_y * _wave(math.cos, time, seed.frequencies, _rotate(seed.phases))
        offset_x = _clamp(raw_x, max_x)
        offset_y = _clamp(raw_y, max_y)
        yield Transform(
            translate_x=geometry.width / 2 + offset_x,
            translate_y=geometry.height / 2 + offset_y,
            scale_factor=scale_factor,
            offset_x=offset_x,
            offset_y=offset_y,
        )


def generate_transforms(
    params: AnimationParameters,
    geometry: CanvasGeometry,
    seed: PhaseSeed,
) -> list[Transform]:
    """Return the full ordered transform sequence for one animation."""
    return list(iter_transforms(params, geometry, seed))


def _wave(
    func: Callable[[float], float],
    time: float,
    frequencies: tuple[float, ...],
    phases: tuple[float, ...],
) -> float:
    return sum(
        weight * func(frequency * time + phase)
        for weight, frequency, phase in zip(TERM_WEIGHTS, frequencies, phases)
    )


def _rotate(values: tuple[float, ...]) -> tuple[float, ...]:
    return values[1:] + values[:1]


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))
