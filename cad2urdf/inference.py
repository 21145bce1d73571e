# -*- coding: utf-8 -*-
"""
Kinematic inference: body records -> Robot entity model.

EN:
Per record, in input order:
  1) link name = occurrence name without the ":<n>" qualifier
  2) parent = the already-created link whose name equals the parent hint
  3) if parented, a joint named by the 3-letter joint code (axis from its last letter)
  4) inertial from mass + inertia (upstream order permuted to canonical order)
  5) inertial origin = center-of-mass offset
  6) visual = package://<robot>/<link>.stl mesh
Then the mirror pass appends "_L" twins of every "_R" link.
Unresolved parents and unmatched joint codes never raise (except in strict
joint-name mode); they are returned as InferenceWarning entries.

CN:
按输入顺序处理每条记录：
  1) link 名 = 去掉 ":<n>" 限定符的实例名
  2) 父 link = 名称等于父提示的已创建 link
  3) 若存在父 link，则按 3 字母关节代码命名关节（轴由最后一个字母决定）
  4) 惯性 = 质量 + 惯性张量（上游分量顺序需显式重排为规范顺序）
  5) 惯性原点 = 质心偏移
  6) visual = package://<robot>/<link>.stl 网格
随后镜像阶段为每个 "_R" link 追加 "_L" 副本。
父 link 无法解析、关节代码不匹配都不会抛出异常（严格关节命名模式除外），而是以 InferenceWarning 返回。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .collision import CollisionBuilder
from .config import ConverterConfig
from .errors import JointNameError, MalformedInputError
from .mirror import synthesize_mirrors
from .model import (
    LIMITED_JOINT_TYPES,
    Collision,
    Inertial,
    InertiaTensor,
    Joint,
    Link,
    Mesh,
    Origin,
    Robot,
    Vector3,
    Visual,
)
from .naming import axis_for_joint_name, match_joint_code, matches_body_pattern, normalize_occurrence_name

# IMPORTANT:
# EN: Do NOT call logging.basicConfig() here. CLI configures logging globally.
# CN: 不要在此模块内配置 logging.basicConfig()，由 CLI 统一配置日志风格。
logger = logging.getLogger("cad2urdf.inference")

# Upstream mass-property order (Ixx, Iyy, Izz, Ixy, Iyz, Ixz) -> canonical (Ixx, Ixy, Ixz, Iyy, Iyz, Izz)
UPSTREAM_TO_CANONICAL = (0, 3, 5, 1, 4, 2)

# Warning codes
UNRESOLVED_PARENT = "unresolved_parent"
SELF_PARENT = "self_parent"
UNMATCHED_JOINT_NAME = "unmatched_joint_name"
MIRROR_NAME_CLASH = "mirror_name_clash"
MIRROR_JOINT_RENAMED = "mirror_joint_renamed"
MISSING_COLLISION_MESH = "missing_collision_mesh"


# =============================================================================
# Input records
# 输入记录
# =============================================================================
def _pick(d: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d:
            return d[k]
    return default


def _floats(value: Any, label: str) -> Tuple[float, ...]:
    """EN: Numeric sequence -> float tuple; a string is rejected. CN: 数值序列转 float 元组，拒绝字符串。"""
    if isinstance(value, (str, bytes)):
        raise TypeError(f"{label} must be a list of numbers, got {type(value).__name__} {value!r}")
    return tuple(float(v) for v in value)


@dataclass(frozen=True)
class BodyRecord:
    """
    EN:
    One rigid body as delivered by the CAD layer, already in output length units.
    `inertia` is in the upstream order (Ixx, Iyy, Izz, Ixy, Iyz, Ixz).

    CN:
    CAD 层提供的单个刚体，长度已换算为输出单位。
    `inertia` 为上游分量顺序 (Ixx, Iyy, Izz, Ixy, Iyz, Ixz)。
    """

    occurrence_name: str
    parent_name_hint: Optional[str]
    mass: float
    center_of_mass: Tuple[float, ...]
    inertia: Tuple[float, ...]
    origin_point: Tuple[float, ...]

    @staticmethod
    def from_dict(d: Mapping[str, Any], index: Optional[int] = None) -> "BodyRecord":
        where = f"#{index}" if index is not None else "record"
        if not isinstance(d, Mapping):
            raise MalformedInputError(f"Body {where}: expected an object, got {type(d).__name__}")

        name = _pick(d, "occurrence_name", "name")
        if name is None:
            raise MalformedInputError(f"Body {where}: missing 'name'")
        try:
            return BodyRecord(
                occurrence_name=str(name),
                parent_name_hint=_pick(d, "parent_name_hint", "parent"),
                mass=float(d["mass"]),
                center_of_mass=_floats(_pick(d, "center_of_mass", "com", default=(0.0, 0.0, 0.0)), "center_of_mass"),
                inertia=_floats(d["inertia"], "inertia"),
                origin_point=_floats(_pick(d, "origin_point", "origin", default=(0.0, 0.0, 0.0)), "origin_point"),
            )
        except KeyError as e:
            raise MalformedInputError(f"Body {where} ('{name}'): missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise MalformedInputError(f"Body {where} ('{name}'): {e}") from e

    def validate(self, index: Optional[int] = None) -> None:
        """
        EN: Reject records that would put NaN or negative mass into the document.
        CN: 拒绝会把 NaN 或负质量写入文档的记录。
        """
        where = f"Body #{index} ('{self.occurrence_name}')" if index is not None else f"Body '{self.occurrence_name}'"
        if not self.occurrence_name or not normalize_occurrence_name(self.occurrence_name):
            raise MalformedInputError(f"{where}: empty occurrence name")
        if not math.isfinite(self.mass) or self.mass < 0.0:
            raise MalformedInputError(f"{where}: mass must be finite and >= 0, got {self.mass}")
        for label, values, size in (
            ("center_of_mass", self.center_of_mass, 3),
            ("inertia", self.inertia, 6),
            ("origin_point", self.origin_point, 3),
        ):
            if len(values) != size:
                raise MalformedInputError(f"{where}: {label} needs {size} values, got {len(values)}")
            if not np.all(np.isfinite(np.asarray(values, dtype=float))):
                raise MalformedInputError(f"{where}: {label} contains non-finite values {list(values)}")

    @property
    def parent_hint(self) -> Optional[str]:
        hint = self.parent_name_hint
        if hint is None:
            return None
        hint = str(hint).strip()
        return hint or None

    def canonical_inertia(self) -> InertiaTensor:
        return InertiaTensor.from_vector([self.inertia[i] for i in UPSTREAM_TO_CANONICAL])


def load_body_records(items: Iterable[Mapping[str, Any]]) -> List[BodyRecord]:
    return [BodyRecord.from_dict(d, i) for i, d in enumerate(items)]


# =============================================================================
# Results
# 结果
# =============================================================================
@dataclass(frozen=True)
class InferenceWarning:
    """
    EN: A recovered lookup failure, attributable to one input record (or link).
    CN: 已恢复的查找失败，可追溯到具体输入记录（或 link）。
    """

    record_index: Optional[int]
    occurrence_name: str
    code: str
    message: str


@dataclass
class InferenceResult:
    robot: Robot
    warnings: List[InferenceWarning] = field(default_factory=list)
    mirrored: List[Tuple[str, str]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def warnings_for(self, code: str) -> List[InferenceWarning]:
        return [w for w in self.warnings if w.code == code]


# =============================================================================
# Engine
# 推断引擎
# =============================================================================
class KinematicInference:
    """
    EN: Builds a Robot from body records according to a ConverterConfig.
    CN: 按 ConverterConfig 从刚体记录构建 Robot。
    """

    def __init__(self, cfg: Optional[ConverterConfig] = None, robot_name: Optional[str] = None):
        self.cfg = cfg or ConverterConfig()
        self.robot_name = robot_name or self.cfg.robot_name
        self.collisions = CollisionBuilder(self.cfg.collision, self.cfg.mesh)

    def infer(self, records: Iterable[BodyRecord]) -> InferenceResult:
        robot = Robot(self.robot_name)
        result = InferenceResult(robot=robot)
        origin_points: Dict[str, Vector3] = {}

        logger.info("Kinematic inference started: robot='%s'", robot.name)
        for index, record in enumerate(records):
            record.validate(index)
            link_name = normalize_occurrence_name(record.occurrence_name)

            if not matches_body_pattern(link_name, self.cfg.body_pattern):
                logger.debug("Skipping body not matching pattern '%s': %s", self.cfg.body_pattern, link_name)
                result.skipped.append(link_name)
                continue
            if robot.has_link(link_name):
                raise MalformedInputError(
                    f"Body #{index} ('{record.occurrence_name}'): duplicate link name '{link_name}'"
                )

            parent = self._resolve_parent(robot, link_name, record, index, result)
            origin_point = Vector3.of(record.origin_point)

            link = Link(name=link_name, parent=parent)
            link.inertial = Inertial(
                mass=record.mass,
                inertia=record.canonical_inertia(),
                origin=Origin(xyz=Vector3.of(record.center_of_mass)),
            )
            link.visual = self._build_visual(link_name, origin_point, origin_points.get(parent) if parent else None)
            link.collision = self._build_collision(link_name, link.visual, record, index, result)
            robot.add_link(link)
            origin_points[link_name] = origin_point

            if parent is not None:
                joint = self._build_joint(link_name, parent, origin_point, origin_points[parent], record, index, result)
                robot.add_joint(joint)

        if self.cfg.mirror.enabled:
            report = synthesize_mirrors(robot, self.cfg.mirror)
            result.mirrored.extend(report.pairs)
            for source, target in report.clashes:
                self._warn(
                    result,
                    None,
                    source,
                    MIRROR_NAME_CLASH,
                    f"Mirror of '{source}' not created: link '{target}' already exists",
                )
            for source_joint, twin_joint in report.renamed_joints:
                self._warn(
                    result,
                    None,
                    twin_joint,
                    MIRROR_JOINT_RENAMED,
                    f"Joint '{source_joint}' has no side letter to mirror; twin joint named '{twin_joint}'",
                )

        logger.info(
            "Kinematic inference finished: links=%d, joints=%d, mirrored=%d, skipped=%d, warnings=%d",
            len(robot.links),
            len(robot.joints),
            len(result.mirrored),
            len(result.skipped),
            len(result.warnings),
        )
        return result

    # -------------------------
    # Steps
    # 步骤
    # -------------------------
    @staticmethod
    def _warn(result: InferenceResult, index: Optional[int], name: str, code: str, message: str) -> None:
        logger.warning("%s", message)
        result.warnings.append(InferenceWarning(record_index=index, occurrence_name=name, code=code, message=message))

    def _resolve_parent(
        self,
        robot: Robot,
        link_name: str,
        record: BodyRecord,
        index: int,
        result: InferenceResult,
    ) -> Optional[str]:
        hint = record.parent_hint
        if hint is None:
            logger.debug("Root link (no parent hint): %s", link_name)
            return None
        if hint == link_name:
            self._warn(result, index, record.occurrence_name, SELF_PARENT, f"Body #{index} ('{link_name}') names itself as parent; treated as root")
            return None
        if not robot.has_link(hint):
            self._warn(
                result,
                index,
                record.occurrence_name,
                UNRESOLVED_PARENT,
                f"Body #{index} ('{link_name}'): parent '{hint}' not found among earlier links; treated as root",
            )
            return None
        return hint

    def _build_visual(self, link_name: str, origin_point: Vector3, parent_origin: Optional[Vector3]) -> Visual:
        mode = self.cfg.visual_origin
        if mode == "relative":
            origin = Origin(xyz=origin_point - parent_origin if parent_origin is not None else origin_point)
        elif mode == "absolute":
            origin = Origin(xyz=origin_point)
        else:
            origin = Origin()
        shape = Mesh(filename=self.cfg.mesh_filename(self.robot_name, link_name), scale=self.cfg.mesh.scale)
        return Visual(shape=shape, origin=origin, material=self.cfg.material)

    def _build_collision(
        self,
        link_name: str,
        visual: Visual,
        record: BodyRecord,
        index: int,
        result: InferenceResult,
    ) -> Optional[Collision]:
        if not self.collisions.enabled:
            return None
        collision = self.collisions.build(link_name, visual)
        if collision is None and self.cfg.collision.mode in ("box", "sphere"):
            self._warn(
                result,
                index,
                record.occurrence_name,
                MISSING_COLLISION_MESH,
                f"Body #{index} ('{link_name}'): no mesh at '{self.collisions.mesh_path(link_name)}'; collision omitted",
            )
        return collision

    def _build_joint(
        self,
        link_name: str,
        parent: str,
        origin_point: Vector3,
        parent_origin: Vector3,
        record: BodyRecord,
        index: int,
        result: InferenceResult,
    ) -> Joint:
        code = match_joint_code(link_name)
        if code is not None:
            name = code
        else:
            policy = self.cfg.joint_name_policy
            if policy == "strict":
                raise JointNameError(f"Body #{index} ('{record.occurrence_name}'): no joint code in link name '{link_name}'")
            name = link_name if policy == "link_name" else ""
            self._warn(
                result,
                index,
                record.occurrence_name,
                UNMATCHED_JOINT_NAME,
                f"Body #{index} ('{link_name}'): no joint code in name; joint name set to '{name}'",
            )

        override = self.cfg.joint_override(code or "")
        joint_type = override.joint_type if override and override.joint_type is not None else self.cfg.default_joint_type
        axis = override.axis if override and override.axis is not None else axis_for_joint_name(name)

        limit = override.limit if override and override.limit is not None else None
        if limit is None and joint_type in LIMITED_JOINT_TYPES:
            limit = self.cfg.default_limit

        if override and override.origin is not None:
            origin = override.origin
        elif self.cfg.joint_origin == "relative":
            origin = Origin(xyz=origin_point - parent_origin)
        else:
            origin = Origin()

        return Joint(
            name=name,
            joint_type=joint_type,
            parent=parent,
            child=link_name,
            origin=origin,
            axis=axis,
            calibration=override.calibration if override else None,
            dynamics=override.dynamics if override else None,
            limit=limit,
            safety_controller=override.safety_controller if override else None,
        )


def infer_robot(
    records: Sequence[BodyRecord],
    cfg: Optional[ConverterConfig] = None,
    robot_name: Optional[str] = None,
) -> InferenceResult:
    """EN: Convenience wrapper around KinematicInference. CN: KinematicInference 的便捷封装。"""
    return KinematicInference(cfg, robot_name).infer(records)
