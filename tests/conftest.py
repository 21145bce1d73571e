"""Shared fixtures for cad2urdf tests."""

import logging

import pytest

from cad2urdf.inference import BodyRecord


def make_record(name, parent=None, mass=1.0, com=(0.0, 0.0, 0.0), inertia=(1.0, 1.0, 1.0, 0.0, 0.0, 0.0), origin=(0.0, 0.0, 0.0)):
    """Build a BodyRecord with upstream-ordered inertia (Ixx, Iyy, Izz, Ixy, Iyz, Ixz)."""
    return BodyRecord(
        occurrence_name=name,
        parent_name_hint=parent,
        mass=mass,
        center_of_mass=tuple(com),
        inertia=tuple(inertia),
        origin_point=tuple(origin),
    )


@pytest.fixture
def hip_records():
    """Scenario 2: a right hip yaw body with a pitch body hanging below it."""
    return [
        make_record("Body_RHY", mass=2.0),
        make_record("Body_RHP", parent="Body_RHY", mass=1.0, com=(0.0, 1.0, 0.0), origin=(0.0, 1.0, 0.0)),
    ]


@pytest.fixture
def restore_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
