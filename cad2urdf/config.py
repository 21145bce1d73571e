# -*- coding: utf-8 -*-
"""
JSON configuration for the converter.

EN: Every key is optional; see ConverterConfig for the defaults.
CN: 所有键均可选，默认值见 ConverterConfig。

Example / 示例:
    {
      "robot_name": "HuboPlus",
      "joint_name_policy": "strict",
      "mirror": {"enabled": true, "source_token": "_R", "target_token": "_L"},
      "joints": {"RHP": {"type": "continuous", "dynamics": {"damping": 0.1, "friction": 0.0}}},
      "material": {"name": "grey", "rgba": [0.7, 0.7, 0.7, 1.0]},
      "collision": {"mode": "box", "mesh_dir": "./meshes"}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .model import (
    DEFAULT_LIMIT,
    Calibration,
    CalibrationEdge,
    Dynamics,
    JointType,
    Limit,
    Material,
    Origin,
    Rgba,
    SafetyController,
    Vector3,
)

# IMPORTANT:
# EN: Do NOT call logging.basicConfig() here. CLI configures logging globally.
# CN: 不要在此模块内配置 logging.basicConfig()，由 CLI 统一配置日志风格。
logger = logging.getLogger("cad2urdf.config")

JOINT_NAME_POLICIES = ("warn", "strict", "link_name")
VISUAL_ORIGIN_MODES = ("relative", "absolute", "none")
JOINT_ORIGIN_MODES = ("none", "relative")
COLLISION_MODES = ("none", "mesh", "box", "sphere")


def _cfg_get(d: Dict[str, Any], path: str, default: Any = None) -> Any:
    """EN: Nested dict getter. CN: 字典嵌套路径读取。"""
    cur: Any = d
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def _choice(value: Any, choices: tuple, key: str) -> str:
    v = str(value).strip().lower()
    if v not in choices:
        raise ValueError(f"Invalid '{key}': {value!r} (expected one of: {', '.join(choices)})")
    return v


def _parse_limit(d: Dict[str, Any], base: Limit = DEFAULT_LIMIT) -> Limit:
    return Limit(
        effort=float(d.get("effort", base.effort)),
        velocity=float(d.get("velocity", base.velocity)),
        lower=float(d.get("lower", base.lower)),
        upper=float(d.get("upper", base.upper)),
    )


def _parse_dynamics(d: Dict[str, Any]) -> Dynamics:
    return Dynamics(damping=float(d.get("damping", 0.0)), friction=float(d.get("friction", 0.0)))


def _parse_safety(d: Dict[str, Any]) -> SafetyController:
    return SafetyController(
        soft_lower_limit=float(d.get("soft_lower_limit", 0.0)),
        soft_upper_limit=float(d.get("soft_upper_limit", 0.0)),
        k_position=float(d.get("k_position", 0.0)),
        k_velocity=float(d.get("k_velocity", 0.0)),
    )


def _parse_calibration(d: Dict[str, Any]) -> Calibration:
    edge = CalibrationEdge(_choice(d.get("edge", "rising"), tuple(e.value for e in CalibrationEdge), "calibration.edge"))
    return Calibration(edge=edge, value=float(d.get("value", 0.0)))


def _parse_origin(d: Dict[str, Any]) -> Origin:
    xyz = d.get("xyz")
    rpy = d.get("rpy")
    return Origin(
        xyz=Vector3.of(xyz) if xyz is not None else None,
        rpy=Vector3.of(rpy) if rpy is not None else None,
    )


# =============================================================================
# Config sections
# 配置分节
# =============================================================================
@dataclass
class JointOverride:
    """
    EN: Explicit per-code joint classification; unset fields keep the name-derived value.
    CN: 按关节代码显式指定的分类；未设置的字段沿用由名称推断的值。
    """

    joint_type: Optional[JointType] = None
    axis: Optional[Vector3] = None
    limit: Optional[Limit] = None
    dynamics: Optional[Dynamics] = None
    safety_controller: Optional[SafetyController] = None
    calibration: Optional[Calibration] = None
    origin: Optional[Origin] = None

    @staticmethod
    def from_dict(d: Dict[str, Any], default_limit: Limit = DEFAULT_LIMIT) -> "JointOverride":
        return JointOverride(
            joint_type=JointType.from_tag(d["type"]) if "type" in d else None,
            axis=Vector3.of(d["axis"]) if d.get("axis") is not None else None,
            limit=_parse_limit(d["limit"], default_limit) if isinstance(d.get("limit"), dict) else None,
            dynamics=_parse_dynamics(d["dynamics"]) if isinstance(d.get("dynamics"), dict) else None,
            safety_controller=_parse_safety(d["safety_controller"]) if isinstance(d.get("safety_controller"), dict) else None,
            calibration=_parse_calibration(d["calibration"]) if isinstance(d.get("calibration"), dict) else None,
            origin=_parse_origin(d["origin"]) if isinstance(d.get("origin"), dict) else None,
        )


@dataclass
class MirrorSettings:
    enabled: bool = True
    source_token: str = "_R"
    target_token: str = "_L"


@dataclass
class MeshSettings:
    package: Optional[str] = None  # defaults to the robot name
    extension: str = ".stl"
    scale: float = 1.0


@dataclass
class CollisionSettings:
    mode: str = "none"  # none|mesh|box|sphere
    mesh_dir: Optional[str] = None


@dataclass
class ConverterConfig:
    """
    EN: Parsed configuration container.
    CN: 解析后的配置容器。
    """

    robot_name: str = "robot"
    joint_name_policy: str = "warn"
    default_joint_type: JointType = JointType.REVOLUTE
    default_limit: Limit = DEFAULT_LIMIT
    joints: Dict[str, JointOverride] = field(default_factory=dict)
    mirror: MirrorSettings = field(default_factory=MirrorSettings)
    body_pattern: Optional[str] = None
    mesh: MeshSettings = field(default_factory=MeshSettings)
    material: Optional[Material] = None
    visual_origin: str = "relative"
    joint_origin: str = "none"
    collision: CollisionSettings = field(default_factory=CollisionSettings)

    def joint_override(self, joint_code: str) -> Optional[JointOverride]:
        if not joint_code:
            return None
        return self.joints.get(joint_code.upper())

    def mesh_filename(self, robot_name: str, link_name: str) -> str:
        package = self.mesh.package or robot_name
        return f"package://{package}/{link_name}{self.mesh.extension}"

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "ConverterConfig":
        root = raw
        for k in ("cad2urdf", "converter", "urdf"):
            if isinstance(root, dict) and k in root and isinstance(root[k], dict):
                root = root[k]
        if not isinstance(root, dict):
            raise ValueError("Configuration root must be a JSON object")

        cfg = ConverterConfig()
        if "robot_name" in root:
            cfg.robot_name = str(root["robot_name"])
        if "joint_name_policy" in root:
            cfg.joint_name_policy = _choice(root["joint_name_policy"], JOINT_NAME_POLICIES, "joint_name_policy")
        if "default_joint_type" in root:
            cfg.default_joint_type = JointType.from_tag(root["default_joint_type"])
        if isinstance(root.get("default_limit"), dict):
            cfg.default_limit = _parse_limit(root["default_limit"])

        joints = root.get("joints") or {}
        if isinstance(joints, dict):
            for code, spec in joints.items():
                if isinstance(spec, dict):
                    cfg.joints[str(code).upper()] = JointOverride.from_dict(spec, cfg.default_limit)

        mirror = root.get("mirror")
        if isinstance(mirror, bool):
            cfg.mirror.enabled = mirror
        elif isinstance(mirror, dict):
            cfg.mirror.enabled = bool(mirror.get("enabled", True))
            cfg.mirror.source_token = str(mirror.get("source_token", cfg.mirror.source_token))
            cfg.mirror.target_token = str(mirror.get("target_token", cfg.mirror.target_token))

        if root.get("body_pattern"):
            cfg.body_pattern = str(root["body_pattern"])

        cfg.mesh.package = _cfg_get(root, "mesh.package", None)
        cfg.mesh.extension = str(_cfg_get(root, "mesh.extension", cfg.mesh.extension))
        cfg.mesh.scale = float(_cfg_get(root, "mesh.scale", cfg.mesh.scale))

        material = root.get("material")
        if isinstance(material, dict) and material.get("rgba") is not None:
            cfg.material = Material(name=str(material.get("name", "material")), rgba=Rgba.of(material["rgba"]))

        if "visual_origin" in root:
            cfg.visual_origin = _choice(root["visual_origin"], VISUAL_ORIGIN_MODES, "visual_origin")
        if "joint_origin" in root:
            cfg.joint_origin = _choice(root["joint_origin"], JOINT_ORIGIN_MODES, "joint_origin")

        cfg.collision.mode = _choice(_cfg_get(root, "collision.mode", "none"), COLLISION_MODES, "collision.mode")
        cfg.collision.mesh_dir = _cfg_get(root, "collision.mesh_dir", None)
        return cfg

    @staticmethod
    def load(json_path: Optional[Union[str, Path]]) -> "ConverterConfig":
        """
        EN: Load config from JSON (supports nested roots: cad2urdf/converter/urdf).
        CN: 从 JSON 加载配置（支持多种嵌套根节点）。
        """
        if json_path is None:
            logger.debug("No JSON config provided. Using built-in defaults.")
            return ConverterConfig()

        p = Path(json_path)
        if not p.exists():
            raise FileNotFoundError(f"JSON config file not found: {p}")

        cfg = ConverterConfig.from_dict(json.loads(p.read_text(encoding="utf-8")))
        logger.info(
            "Loaded JSON config: file='%s', joint_overrides=%d, mirror=%s, collision=%s",
            str(p),
            len(cfg.joints),
            "on" if cfg.mirror.enabled else "off",
            cfg.collision.mode,
        )
        return cfg
