# tiling_tools/ParameterPresets.py
"""
Deterministic shape-parameter presets per tiling type.

Presets come from a seeded Park-Miller generator keyed by the tiling type
index, so a type always produces the same tile shapes on every surface and
every run. A fractional type value blends two presets of the same type.
"""
import math

PRNG_MULTIPLIER = 16807
PRNG_MODULUS = 2147483647

PRESET_A_SALT = 42
PRESET_B_SALT = 137
SEED_STRIDE = 1000

PARAM_MIN = 0.1
PARAM_SPAN = 0.8

SNAP_LOW = 0.001
SNAP_HIGH = 0.999


def seeded_random(seed):
    """Minimal-standard Lehmer generator; returns a callable yielding floats in [0, 1)."""
    state = [seed]

    def next_value():
        state[0] = (state[0] * PRNG_MULTIPLIER) % PRNG_MODULUS
        return (state[0] - 1) / (PRNG_MODULUS - 1)

    return next_value


def random_params(count, seed):
    """`count` parameters in [0.1, 0.9] from the given seed."""
    if count <= 0:
        return []
    rng = seeded_random(seed)
    return [rng() * PARAM_SPAN + PARAM_MIN for _ in range(count)]


def preset_seeds(type_index):
    return (type_index * SEED_STRIDE + PRESET_A_SALT,
            type_index * SEED_STRIDE + PRESET_B_SALT)


def interpolated_params(count, type_index, frac):
    """
    Blend preset A and preset B of a tiling type by `frac`.
    Fractions within 0.001 of either end return that preset unchanged.
    """
    if count <= 0:
        return []
    seed_a, seed_b = preset_seeds(type_index)
    params_a = random_params(count, seed_a)
    params_b = random_params(count, seed_b)
    if frac < SNAP_LOW:
        return params_a
    if frac > SNAP_HIGH:
        return params_b
    return [a + (b - a) * frac for a, b in zip(params_a, params_b)]


def resolve_tiling_index(value, num_types):
    """
    Clamp a (possibly fractional) tiling type value into range.
    Returns (integer index, fractional part). Never raises: sliders must not stick.
    """
    max_index = max(num_types - 1, 0)
    try:
        value = float(value)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0
    clamped = min(max(value, 0.0), float(max_index))
    index = int(math.floor(clamped))
    return index, clamped - index
