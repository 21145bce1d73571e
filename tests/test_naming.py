"""Tests for the naming-convention adapter."""

from cad2urdf.model import Vector3
from cad2urdf.naming import (
    axis_for_joint_name,
    is_mirror_source,
    match_joint_code,
    matches_body_pattern,
    mirror_joint_name,
    mirror_link_name,
    normalize_occurrence_name,
)


def test_normalize_occurrence_name():
    assert normalize_occurrence_name("Body_RHP:1") == "Body_RHP"
    assert normalize_occurrence_name("Body_RHP") == "Body_RHP"
    assert normalize_occurrence_name("Body_RHP:1:2") == "Body_RHP"


def test_match_joint_code():
    assert match_joint_code("Body_RHP") == "RHP"
    assert match_joint_code("Body_LKP") == "LKP"
    assert match_joint_code("Body_rhy") == "rhy"
    assert match_joint_code("Body_Torso") is None
    assert match_joint_code("") is None


def test_axis_table():
    assert axis_for_joint_name("RHR") == Vector3(1.0, 0.0, 0.0)
    assert axis_for_joint_name("RHP") == Vector3(0.0, 1.0, 0.0)
    assert axis_for_joint_name("RHY") == Vector3(0.0, 0.0, 1.0)
    assert axis_for_joint_name("rhy") is None
    assert axis_for_joint_name("RHp") is None
    assert axis_for_joint_name("Body_Torso") is None
    assert axis_for_joint_name("") is None


def test_mirror_names():
    assert is_mirror_source("Body_RHP")
    assert not is_mirror_source("Body_LHP")
    assert mirror_link_name("Body_RHP") == "Body_LHP"
    assert mirror_link_name("Body_RHP_Rear") == "Body_LHP_Rear"
    assert mirror_joint_name("RHP") == "LHP"
    assert mirror_joint_name("rhp") == "lhp"
    assert mirror_joint_name("Body_RArm") == "Body_LArm"
    assert mirror_joint_name("") == ""
    assert mirror_link_name("arm-right", "-right", "-left") == "arm-left"


def test_body_pattern():
    assert matches_body_pattern("Body_RHP", None)
    assert matches_body_pattern("Body_RHP", "^Body_")
    assert matches_body_pattern("body_rhp", "^Body_")
    assert not matches_body_pattern("Bolt_M3", "^Body_")
