"""Tests for the entity model and its value types."""

import numpy as np
import pytest

from cad2urdf.errors import ModelIntegrityError
from cad2urdf.model import (
    DEFAULT_LIMIT,
    Calibration,
    CalibrationEdge,
    InertiaTensor,
    Joint,
    JointType,
    Limit,
    Link,
    Origin,
    Rgba,
    Robot,
    Vector3,
)


def test_inertia_vector_matrix_round_trip():
    """Vector -> matrix -> vector reproduces the six values exactly."""
    values = (0.125, -0.003, 0.0071, 2.5, 1e-9, 3.75)
    tensor = InertiaTensor.from_vector(values)
    m = tensor.as_matrix()

    np.testing.assert_array_equal(m, m.T)
    assert m[0, 1] == values[1] and m[1, 0] == values[1]
    assert m[0, 2] == values[2] and m[2, 0] == values[2]
    assert m[1, 2] == values[4] and m[2, 1] == values[4]
    assert InertiaTensor.from_matrix(m).as_vector() == values


def test_inertia_matrix_vector_round_trip():
    """Matrix -> vector -> matrix reproduces the matrix exactly."""
    m = np.array([[4.0, 0.1, -0.2], [0.1, 5.0, 0.3], [-0.2, 0.3, 6.0]])
    tensor = InertiaTensor.from_matrix(m)
    assert tensor.as_vector() == (4.0, 0.1, -0.2, 5.0, 0.3, 6.0)
    np.testing.assert_array_equal(tensor.as_matrix(), m)


def test_inertia_rejects_bad_input():
    with pytest.raises(ValueError):
        InertiaTensor.from_matrix([[1.0, 0.5, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    with pytest.raises(ValueError):
        InertiaTensor.from_matrix(np.eye(2))
    with pytest.raises(ValueError):
        InertiaTensor.from_vector([1.0, 2.0, 3.0])


def test_inertia_mirror_flips_only_y_cross_terms():
    tensor = InertiaTensor(1.0, 0.2, 0.3, 4.0, 0.5, 6.0)
    mirrored = tensor.mirrored()
    assert mirrored.as_vector() == (1.0, -0.2, 0.3, 4.0, -0.5, 6.0)
    m = mirrored.as_matrix()
    np.testing.assert_array_equal(m, m.T)


def test_value_types():
    v = Vector3.of([1, 2, 3])
    assert v.as_tuple() == (1.0, 2.0, 3.0)
    assert (v - Vector3(1.0, 1.0, 1.0)) == Vector3(0.0, 1.0, 2.0)
    assert (v + Vector3(1.0, 1.0, 1.0)) == Vector3(2.0, 3.0, 4.0)
    assert v.mirrored_y() == Vector3(1.0, -2.0, 3.0)
    assert Rgba.of([255, 0, 0, 1.0]).as_tuple() == (255.0, 0.0, 0.0, 1.0)
    with pytest.raises(ValueError):
        Vector3.of([1, 2])
    with pytest.raises(ValueError):
        Rgba.of([1, 2, 3])


def test_origin_presence_and_defaults():
    assert Origin().is_empty
    only_rpy = Origin(rpy=Vector3(0.1, 0.0, 0.0))
    assert not only_rpy.is_empty
    xyz, rpy = only_rpy.resolved()
    assert xyz == Vector3()
    assert rpy == Vector3(0.1, 0.0, 0.0)
    assert only_rpy.mirrored_y() is only_rpy
    assert Origin(xyz=Vector3(1.0, 2.0, 3.0)).mirrored_y().xyz == Vector3(1.0, -2.0, 3.0)


def test_joint_default_limit():
    """Revolute and prismatic joints get the default limit; other types do not."""
    assert Joint("a", JointType.REVOLUTE, "p", "c").limit == DEFAULT_LIMIT
    assert Joint("a", JointType.PRISMATIC, "p", "c").limit == Limit(1.0, 30.0, 0.0, 180.0)
    assert Joint("a", JointType.CONTINUOUS, "p", "c").limit is None
    assert Joint("a", JointType.FIXED, "p", "c").limit is None
    custom = Limit(2.0, 1.0, -1.0, 1.0)
    assert Joint("a", JointType.REVOLUTE, "p", "c", limit=custom).limit == custom


def test_joint_type_tags():
    assert [t.tag for t in JointType] == ["revolute", "continuous", "prismatic", "fixed", "floating", "planar"]
    assert JointType.from_tag(" Prismatic ") is JointType.PRISMATIC
    with pytest.raises(ValueError):
        JointType.from_tag("hinge")


def test_calibration():
    assert Calibration.rising().tag == "rising"
    assert Calibration.rising().value == 0.0
    falling = Calibration.falling(0.25)
    assert falling.edge is CalibrationEdge.FALLING
    assert falling.value == 0.25


def test_robot_rejects_duplicate_and_dangling_links():
    robot = Robot("r")
    robot.add_link(Link("base"))
    with pytest.raises(ModelIntegrityError):
        robot.add_link(Link("base"))
    with pytest.raises(ModelIntegrityError):
        robot.add_link(Link("arm", parent="missing"))
    with pytest.raises(ModelIntegrityError):
        robot.add_link(Link("self", parent="self"))


def test_robot_joint_references():
    robot = Robot("r", links=[Link("base"), Link("arm", parent="base")])
    with pytest.raises(ModelIntegrityError):
        robot.add_joint(Joint("j", JointType.FIXED, "base", "missing"))
    with pytest.raises(ModelIntegrityError):
        robot.add_joint(Joint("j", JointType.FIXED, "base", "base"))
    robot.add_joint(Joint("j", JointType.FIXED, "base", "arm"))

    assert robot.joint_for_child("arm").name == "j"
    assert robot.joint_for_child("base") is None
    assert [l.name for l in robot.root_links()] == ["base"]
    assert [l.name for l in robot.children_of("base")] == ["arm"]
    assert robot.get_link("arm").parent == "base"
    assert robot.get_link("nope") is None


def test_robot_constructor_validates():
    with pytest.raises(ModelIntegrityError):
        Robot("r", links=[Link("a"), Link("a")])


def test_robot_validate_detects_direct_mutation():
    robot = Robot("r", links=[Link("base"), Link("arm", parent="base")])
    robot.validate()
    robot.links[1].parent = "ghost"
    with pytest.raises(ModelIntegrityError):
        robot.validate()
