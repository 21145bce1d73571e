# -*- coding: utf-8 -*-
"""
Bilateral mirror synthesis.

EN:
Every link whose name carries the source side token ("_R") gets a mirrored
twin ("_L") appended to the robot, together with a twin of the joint that
connects it to its parent. The twin is built field by field:
- inertial origin, visual origin, collision origins and joint origin: y -> -y
- inertia tensor: ixy and iyz change sign, diagonal and ixz are kept
- parent references that point at mirrored links are re-pointed to their twins
- a joint name without a side letter (e.g. "THP") is replaced by the twin link name
Only these sign flips are applied. This is the reflection about the XZ plane
of the modeled mechanism, not a general reflection of arbitrary geometry.

CN:
名称包含源侧标识（"_R"）的每个 link 都会生成一个镜像副本（"_L"）追加到 robot 中，
并同时复制连接其父 link 的关节。副本逐字段构造：
- 惯性原点、视觉原点、碰撞原点与关节原点：y 取反
- 惯性张量：ixy 与 iyz 取反，对角项与 ixz 保持不变
- 指向已镜像 link 的父引用改为指向对应副本
- 不含侧字母的关节名（如 "THP"）改用副本 link 的名称
仅做上述符号翻转，即关于机构 XZ 对称面的反射，而非任意几何体的一般反射。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from .config import MirrorSettings
from .model import Collision, Inertial, Joint, Link, Robot, Visual
from .naming import is_mirror_source, mirror_joint_name, mirror_link_name

logger = logging.getLogger("cad2urdf.mirror")


@dataclass
class MirrorReport:
    pairs: List[Tuple[str, str]] = field(default_factory=list)  # (source link, mirrored link)
    clashes: List[Tuple[str, str]] = field(default_factory=list)  # (source link, existing link)
    renamed_joints: List[Tuple[str, str]] = field(default_factory=list)  # (source joint, twin joint)


def _mirror_inertial(inertial: Optional[Inertial]) -> Optional[Inertial]:
    if inertial is None:
        return None
    return replace(inertial, inertia=inertial.inertia.mirrored(), origin=inertial.origin.mirrored_y())


def _mirror_visual(visual: Optional[Visual]) -> Optional[Visual]:
    if visual is None:
        return None
    return replace(visual, origin=visual.origin.mirrored_y())


def _mirror_collision(collision: Optional[Collision]) -> Optional[Collision]:
    if collision is None:
        return None
    return replace(collision, origin=collision.origin.mirrored_y())


def mirror_link(link: Link, name: str, parent: Optional[str]) -> Link:
    """EN: Structural copy of `link` reflected about XZ. CN: 关于 XZ 平面反射的结构化副本。"""
    return Link(
        name=name,
        parent=parent,
        inertial=_mirror_inertial(link.inertial),
        visual=_mirror_visual(link.visual),
        collision=_mirror_collision(link.collision),
        collision_group=[_mirror_collision(c) for c in link.collision_group],
    )


def mirror_joint(joint: Joint, name: str, parent: str, child: str) -> Joint:
    return Joint(
        name=name,
        joint_type=joint.joint_type,
        parent=parent,
        child=child,
        origin=joint.origin.mirrored_y(),
        axis=joint.axis,
        calibration=joint.calibration,
        dynamics=joint.dynamics,
        limit=joint.limit,
        safety_controller=joint.safety_controller,
    )


def synthesize_mirrors(robot: Robot, settings: MirrorSettings) -> MirrorReport:
    """
    EN:
    Append mirrored twins for every source-side link of `robot`, in link order.
    Original links and joints are left untouched. A twin whose name already
    exists is not created; it is reported as a clash and the existing link is
    used as the re-pointing target for later twins.

    CN:
    按 link 顺序为 robot 中每个源侧 link 追加镜像副本，原有 link 与 joint 不做修改。
    若副本名称已存在则不创建，记为冲突，并以已存在的 link 作为后续副本的父引用目标。
    """
    report = MirrorReport()
    src, dst = settings.source_token, settings.target_token
    sources = [link for link in robot.links if is_mirror_source(link.name, src)]
    name_map: Dict[str, str] = {}

    for link in sources:
        target = mirror_link_name(link.name, src, dst)
        if robot.has_link(target):
            logger.warning("Mirror target already exists, skipping: source='%s', target='%s'", link.name, target)
            report.clashes.append((link.name, target))
            name_map[link.name] = target
            continue

        parent = name_map.get(link.parent, link.parent) if link.parent is not None else None
        twin = robot.add_link(mirror_link(link, target, parent))
        name_map[link.name] = target

        joint = robot.joint_for_child(link.name)
        if joint is not None:
            joint_name = mirror_joint_name(joint.name, src, dst)
            if joint.name and joint_name == joint.name:
                # No side letter in the code ("THP"); name the twin joint after its link
                joint_name = twin.name
                logger.warning(
                    "Mirrored joint name unchanged, using link name: joint='%s', twin='%s'", joint.name, joint_name
                )
                report.renamed_joints.append((joint.name, joint_name))
            robot.add_joint(
                mirror_joint(
                    joint,
                    name=joint_name,
                    parent=name_map.get(joint.parent, joint.parent),
                    child=twin.name,
                )
            )
        report.pairs.append((link.name, target))
        logger.debug("Mirrored link: '%s' -> '%s' (parent='%s')", link.name, target, parent)

    logger.info("Mirror synthesis: mirrored=%d, clashes=%d", len(report.pairs), len(report.clashes))
    return report
