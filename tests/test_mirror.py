"""Tests for bilateral mirror synthesis."""

from cad2urdf.config import ConverterConfig, MirrorSettings
from cad2urdf.inference import MIRROR_JOINT_RENAMED, MIRROR_NAME_CLASH, infer_robot
from cad2urdf.mirror import mirror_link, synthesize_mirrors
from cad2urdf.model import (
    Collision,
    Box,
    Inertial,
    InertiaTensor,
    Joint,
    JointType,
    Link,
    Mesh,
    Origin,
    Robot,
    Vector3,
    Visual,
)

from conftest import make_record


def _source_link(name, parent=None):
    return Link(
        name=name,
        parent=parent,
        inertial=Inertial(
            mass=1.5,
            inertia=InertiaTensor(1.0, 0.1, 0.2, 2.0, 0.3, 3.0),
            origin=Origin(xyz=Vector3(0.1, 0.2, 0.3), rpy=Vector3(0.0, 0.5, 0.0)),
        ),
        visual=Visual(shape=Mesh("package://r/%s.stl" % name), origin=Origin(xyz=Vector3(1.0, 2.0, 3.0))),
        collision=Collision(shape=Box(Vector3(1.0, 1.0, 1.0)), origin=Origin(xyz=Vector3(0.0, -4.0, 0.0))),
    )


def test_mirror_link_reflects_about_xz():
    twin = mirror_link(_source_link("Body_RHP"), "Body_LHP", "Body_LHY")

    assert twin.name == "Body_LHP"
    assert twin.parent == "Body_LHY"
    assert twin.inertial.mass == 1.5
    assert twin.inertial.origin.xyz == Vector3(0.1, -0.2, 0.3)
    assert twin.inertial.origin.rpy == Vector3(0.0, 0.5, 0.0)
    assert twin.inertial.inertia == InertiaTensor(1.0, -0.1, 0.2, 2.0, -0.3, 3.0)
    assert twin.visual.origin.xyz == Vector3(1.0, -2.0, 3.0)
    assert twin.visual.shape.filename == "package://r/Body_RHP.stl"
    assert twin.collision.origin.xyz == Vector3(0.0, 4.0, 0.0)


def test_chain_is_repointed_to_twins():
    """Torso -> Body_RHY -> Body_RHP: the left chain hangs from the shared torso."""
    robot = Robot("r")
    robot.add_link(Link("Torso"))
    robot.add_link(_source_link("Body_RHY", parent="Torso"))
    robot.add_link(_source_link("Body_RHP", parent="Body_RHY"))
    robot.add_joint(Joint("RHY", JointType.REVOLUTE, "Torso", "Body_RHY", origin=Origin(xyz=Vector3(0.0, -0.1, 0.0))))
    robot.add_joint(Joint("RHP", JointType.REVOLUTE, "Body_RHY", "Body_RHP", axis=Vector3(0.0, 1.0, 0.0)))

    report = synthesize_mirrors(robot, MirrorSettings())

    assert report.pairs == [("Body_RHY", "Body_LHY"), ("Body_RHP", "Body_LHP")]
    assert report.clashes == []
    assert [link.name for link in robot.links] == ["Torso", "Body_RHY", "Body_RHP", "Body_LHY", "Body_LHP"]
    assert robot.get_link("Body_LHY").parent == "Torso"
    assert robot.get_link("Body_LHP").parent == "Body_LHY"

    lhy, lhp = robot.joints[2], robot.joints[3]
    assert (lhy.name, lhy.parent, lhy.child) == ("LHY", "Torso", "Body_LHY")
    assert lhy.origin.xyz == Vector3(0.0, 0.1, 0.0)
    assert (lhp.name, lhp.parent, lhp.child) == ("LHP", "Body_LHY", "Body_LHP")
    assert lhp.axis == Vector3(0.0, 1.0, 0.0)

    # Sources are untouched
    assert robot.joints[0].origin.xyz == Vector3(0.0, -0.1, 0.0)
    assert robot.get_link("Body_RHP").inertial.inertia.ixy == 0.1
    robot.validate()


def test_mirror_is_involutive_on_values():
    link = _source_link("Body_RHP")
    back = mirror_link(mirror_link(link, "Body_LHP", None), "Body_RHP", None)
    assert back.inertial == link.inertial
    assert back.visual == link.visual
    assert back.collision == link.collision


def test_existing_twin_is_reported_as_clash():
    records = [
        make_record("Body_Torso"),
        make_record("Body_RHY", parent="Body_Torso"),
        make_record("Body_LHY", parent="Body_Torso", mass=3.0),
        make_record("Body_RHP", parent="Body_RHY"),
    ]
    result = infer_robot(records)
    robot = result.robot

    assert [link.name for link in robot.links].count("Body_LHY") == 1
    assert robot.get_link("Body_LHY").inertial.mass == 3.0
    assert robot.get_link("Body_LHP").parent == "Body_LHY"
    (warning,) = result.warnings_for(MIRROR_NAME_CLASH)
    assert warning.occurrence_name == "Body_RHY"
    assert warning.record_index is None


def test_disabled_mirror_leaves_robot_alone(hip_records):
    cfg = ConverterConfig()
    cfg.mirror.enabled = False
    result = infer_robot(hip_records, cfg=cfg)
    assert [link.name for link in result.robot.links] == ["Body_RHY", "Body_RHP"]
    assert result.mirrored == []


def test_custom_side_tokens():
    robot = Robot("r")
    robot.add_link(Link("arm-right"))
    report = synthesize_mirrors(robot, MirrorSettings(source_token="-right", target_token="-left"))
    assert report.pairs == [("arm-right", "arm-left")]
    assert robot.has_link("arm-left")


def test_twin_joint_without_side_letter_is_renamed():
    """A code like THP has no side letter; the twin joint takes the twin link's name."""
    records = [make_record("Body_Torso"), make_record("Body_THP_R", parent="Body_Torso")]
    result = infer_robot(records)
    robot = result.robot

    assert [(j.name, j.parent, j.child) for j in robot.joints] == [
        ("THP", "Body_Torso", "Body_THP_R"),
        ("Body_THP_L", "Body_Torso", "Body_THP_L"),
    ]
    assert len({j.name for j in robot.joints}) == len(robot.joints)
    (warning,) = result.warnings_for(MIRROR_JOINT_RENAMED)
    assert warning.occurrence_name == "Body_THP_L"


def test_empty_joint_name_is_not_renamed():
    records = [make_record("Body_Torso"), make_record("Body_Arm_R", parent="Body_Torso")]
    result = infer_robot(records)
    assert [j.name for j in result.robot.joints] == ["", ""]
    assert result.warnings_for(MIRROR_JOINT_RENAMED) == []
