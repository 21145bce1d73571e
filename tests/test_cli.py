"""End-to-end tests for the converter entry points and the command line."""

import json
import xml.etree.ElementTree as ET

import pytest

from cad2urdf.cli import build_parser, main
from cad2urdf.converter import cad_to_urdf, load_bodies_file
from cad2urdf.errors import MalformedInputError

BODIES = [
    {"name": "Body_Torso:1", "parent": None, "mass": 10.0, "inertia": [1, 1, 1, 0, 0, 0]},
    {
        "name": "Body_RHY:1",
        "parent": "Body_Torso",
        "mass": 2.0,
        "center_of_mass": [0, -0.1, 0],
        "inertia": [1, 2, 3, 4, 5, 6],
        "origin": [0, -0.1, -0.2],
    },
    {"name": "Body_RHP:1", "parent": "Body_RHY", "mass": 1.0, "inertia": [1, 1, 1, 0, 0, 0]},
]


@pytest.fixture
def bodies_file(tmp_path):
    path = tmp_path / "bodies.json"
    path.write_text(json.dumps({"robot_name": "FileBot", "bodies": BODIES}), encoding="utf-8")
    return path


def _names(urdf_path, tag):
    return [e.get("name") for e in ET.parse(str(urdf_path)).getroot().iter(tag)]


def test_load_bodies_file_accepts_plain_list(tmp_path):
    path = tmp_path / "bodies.json"
    path.write_text(json.dumps(BODIES), encoding="utf-8")
    name, records = load_bodies_file(path)
    assert name is None
    assert [r.occurrence_name for r in records] == ["Body_Torso:1", "Body_RHY:1", "Body_RHP:1"]


def test_load_bodies_file_rejects_bad_input(tmp_path):
    path = tmp_path / "bodies.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MalformedInputError):
        load_bodies_file(path)

    path.write_text(json.dumps({"bodies": "nope"}), encoding="utf-8")
    with pytest.raises(MalformedInputError):
        load_bodies_file(path)

    with pytest.raises(FileNotFoundError):
        load_bodies_file(tmp_path / "missing.json")


def test_cad_to_urdf_name_precedence(tmp_path, bodies_file):
    out = tmp_path / "robot.urdf"
    result = cad_to_urdf(bodies_file, out)
    assert result.robot.name == "FileBot"
    assert ET.parse(str(out)).getroot().get("name") == "FileBot"

    result = cad_to_urdf(bodies_file, out, robot_name="ArgBot")
    assert result.robot.name == "ArgBot"
    assert "package://ArgBot/Body_RHY.stl" in out.read_text(encoding="utf-8")


def test_cli_writes_urdf(tmp_path, bodies_file, restore_logging):
    out = tmp_path / "out" / "robot.urdf"
    main([str(bodies_file), "-o", str(out), "-n", "HuboPlus", "--log-level", "WARNING"])

    root = ET.parse(str(out)).getroot()
    assert root.get("name") == "HuboPlus"
    assert _names(out, "link") == ["Body_Torso", "Body_RHY", "Body_RHP", "Body_LHY", "Body_LHP"]
    assert _names(out, "joint") == ["RHY", "RHP", "LHY", "LHP"]


def test_cli_switches(tmp_path, bodies_file, restore_logging):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"joints": {"RHY": {"type": "fixed"}}}), encoding="utf-8")
    out = tmp_path / "robot.urdf"
    log_file = tmp_path / "run.log"

    main([str(bodies_file), "-o", str(out), "-j", str(config), "--no-mirror", "--log-file", str(log_file)])

    assert _names(out, "link") == ["Body_Torso", "Body_RHY", "Body_RHP"]
    joint = ET.parse(str(out)).getroot().find("joint[@name='RHY']")
    assert joint.get("type") == "fixed"
    assert joint.find("limit") is None
    assert "[STEP 3/3] Write URDF" in log_file.read_text(encoding="utf-8")


def test_cli_strict_mode_fails(tmp_path, restore_logging):
    bodies = tmp_path / "bodies.json"
    bodies.write_text(
        json.dumps(
            [
                {"name": "Base", "mass": 1.0, "inertia": [1, 1, 1, 0, 0, 0]},
                {"name": "Arm", "parent": "Base", "mass": 1.0, "inertia": [1, 1, 1, 0, 0, 0]},
            ]
        ),
        encoding="utf-8",
    )
    out = tmp_path / "robot.urdf"
    with pytest.raises(SystemExit) as exc:
        main([str(bodies), "-o", str(out), "--strict"])
    assert exc.value.code == 1
    assert not out.exists()


def test_cli_missing_input_fails(tmp_path, restore_logging):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing.json"), "-o", str(tmp_path / "robot.urdf")])
    assert exc.value.code == 1


def test_parser_requires_output():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["bodies.json"])
