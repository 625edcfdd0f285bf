"""
Telemetry streaming example.

A sender packs car telemetry as a flat run of little-endian floats, the way
UDP telemetry feeds do, and ships only the numbers. The receiver declares
the structure once and then feeds every datagram straight into FlatState.

Run with: python examples/telemetry_stream.py
"""

import logging
import math
import struct

from flatstate import FlatState

logger = logging.getLogger(__name__)

_FRAME = struct.Struct("<12f")

STRUCTURE = {
    "time": 0,
    "position.x": 1,
    "position.y": 2,
    "position.z": 3,
    "speed": (4, lambda mps: round(mps * 3.6, 1)),  # km/h
    "rpm": 5,
    "wheels.0.slip": 6,
    "wheels.1.slip": 7,
    "wheels.2.slip": 8,
    "wheels.3.slip": 9,
    "pedals": (10, 12, lambda pair: {"throttle": pair[0], "brake": pair[1]}),
}


def make_datagram(tick: int) -> bytes:
    """Pack one synthetic telemetry frame."""
    t = tick * 0.1
    slip = [0.02 * math.sin(t + wheel) for wheel in range(4)]
    return _FRAME.pack(
        t,
        100.0 * math.cos(t), 0.0, 100.0 * math.sin(t),
        20.0 + tick,
        3000.0 + 150.0 * tick,
        *slip,
        min(1.0, 0.1 * tick), 0.0,
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    state = FlatState()
    state.set_structure(STRUCTURE)

    for tick in range(5):
        state.set_values(_FRAME.unpack(make_datagram(tick)))
        logger.info(
            f"t={state.fields.time:.1f}s speed={state.fields.speed}km/h "
            f"rpm={state.fields.rpm:.0f} throttle={state.fields.pedals['throttle']:.1f} "
            f"front-left slip={state.fields.wheels[0].slip:+.3f}"
        )

    logger.info(state.export_json(indent=2))


if __name__ == "__main__":
    main()
