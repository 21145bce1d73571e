# -*- coding: utf-8 -*-
"""
URDF document serializer.

Public interface / 对外接口:
    robot_to_element(robot) -> ET.Element
    render_urdf(robot, timestamp=None) -> bytes
    write_urdf(robot, urdf_path, timestamp=None) -> Path

EN:
- Document = XML declaration, one " Exported at <time> " comment, one <robot>.
- Links are emitted in insertion order, then joints in insertion order.
- Child elements follow a fixed order; absent optional fields emit nothing.
- Numbers use a locale-independent "%.15g" form; vectors are space-joined.
- The whole document is rendered in memory first, then written to a temp file
  next to the target and moved into place, keeping the target's file mode. On
  failure the temp file is removed and an existing target is left as it was.

CN:
- 文档 = XML 声明 + 一条 " Exported at <时间> " 注释 + 一个 <robot> 根元素。
- 先按插入顺序输出所有 link，再按插入顺序输出所有 joint。
- 子元素顺序固定；缺省的可选字段不输出任何元素。
- 数值使用与区域设置无关的 "%.15g" 格式；向量以空格连接。
- 整个文档先在内存中生成，再写入目标旁的临时文件并原子替换；
  保留目标文件的权限位；失败时删除临时文件，已有目标文件保持不变。
"""

from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union
from xml.dom import minidom

from .errors import DocumentWriteError
from .model import (
    Box,
    Calibration,
    Collision,
    Cylinder,
    Dynamics,
    Inertial,
    Joint,
    Limit,
    Link,
    Material,
    Mesh,
    Origin,
    Robot,
    SafetyController,
    Shape,
    Sphere,
    Vector3,
    Visual,
)

# IMPORTANT:
# EN: Do NOT call logging.basicConfig() here. CLI configures logging globally.
# CN: 不要在此模块内配置 logging.basicConfig()，由 CLI 统一配置日志风格。
logger = logging.getLogger("cad2urdf.serializer")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# Formatting
# 格式化
# =============================================================================
def format_number(value: float) -> str:
    """
    EN: Locale-independent number text: 1.0 -> "1", 0.25 -> "0.25", -0.0 -> "0".
    CN: 与区域设置无关的数值文本：1.0 -> "1"，0.25 -> "0.25"，-0.0 -> "0"。
    """
    return format(float(value) + 0.0, ".15g")


def format_vector(*values: float) -> str:
    return " ".join(format_number(v) for v in values)


def _vec3(v: Vector3) -> str:
    return format_vector(v.x, v.y, v.z)


# =============================================================================
# Element builders
# 元素构建
# =============================================================================
def _add_origin(parent: ET.Element, origin: Optional[Origin]) -> None:
    """
    EN: <origin xyz rpy/> when either part is present; the absent part is zero.
    CN: 只要 xyz 或 rpy 任一存在就输出 <origin>，缺省部分补 0。
    """
    if origin is None or origin.is_empty:
        return
    xyz, rpy = origin.resolved()
    ET.SubElement(parent, "origin", attrib={"xyz": _vec3(xyz), "rpy": _vec3(rpy)})


def _add_geometry(parent: ET.Element, shape: Shape) -> None:
    geometry = ET.SubElement(parent, "geometry")
    if isinstance(shape, Box):
        ET.SubElement(geometry, "box", attrib={"size": _vec3(shape.size)})
    elif isinstance(shape, Cylinder):
        ET.SubElement(
            geometry,
            "cylinder",
            attrib={"radius": format_number(shape.radius), "length": format_number(shape.length)},
        )
    elif isinstance(shape, Sphere):
        ET.SubElement(geometry, "sphere", attrib={"radius": format_number(shape.radius)})
    elif isinstance(shape, Mesh):
        ET.SubElement(geometry, "mesh", attrib={"filename": shape.filename, "scale": format_number(shape.scale)})
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def _add_material(parent: ET.Element, material: Material) -> None:
    elem = ET.SubElement(parent, "material", attrib={"name": material.name})
    ET.SubElement(elem, "color", attrib={"rgba": format_vector(*material.rgba.as_tuple())})


def _add_inertial(parent: ET.Element, inertial: Inertial) -> None:
    elem = ET.SubElement(parent, "inertial")
    _add_origin(elem, inertial.origin)
    ET.SubElement(elem, "mass", attrib={"value": format_number(inertial.mass)})
    names = ("ixx", "ixy", "ixz", "iyy", "iyz", "izz")
    ET.SubElement(
        elem,
        "inertia",
        attrib={k: format_number(v) for k, v in zip(names, inertial.inertia.as_vector())},
    )


def _add_visual(parent: ET.Element, visual: Visual) -> None:
    elem = ET.SubElement(parent, "visual")
    _add_origin(elem, visual.origin)
    _add_geometry(elem, visual.shape)
    if visual.material is not None:
        _add_material(elem, visual.material)


def _add_collision(parent: ET.Element, collision: Collision) -> None:
    elem = ET.SubElement(parent, "collision")
    _add_origin(elem, collision.origin)
    _add_geometry(elem, collision.shape)


def link_to_element(link: Link) -> ET.Element:
    """
    EN: <link> with inertial, visual, collision, then secondary collisions.
    CN: <link>，依次包含 inertial、visual、collision 以及附加碰撞体。
    """
    elem = ET.Element("link", attrib={"name": link.name})
    if link.inertial is not None:
        _add_inertial(elem, link.inertial)
    if link.visual is not None:
        _add_visual(elem, link.visual)
    if link.collision is not None:
        _add_collision(elem, link.collision)
    for extra in link.collision_group:
        _add_collision(elem, extra)
    return elem


def _add_calibration(parent: ET.Element, calibration: Calibration) -> None:
    ET.SubElement(parent, "calibration", attrib={calibration.tag: format_number(calibration.value)})


def _add_dynamics(parent: ET.Element, dynamics: Dynamics) -> None:
    ET.SubElement(
        parent,
        "dynamics",
        attrib={"damping": format_number(dynamics.damping), "friction": format_number(dynamics.friction)},
    )


def _add_limit(parent: ET.Element, limit: Limit) -> None:
    attrib: Dict[str, str] = {
        "effort": format_number(limit.effort),
        "velocity": format_number(limit.velocity),
        "lower": format_number(limit.lower),
        "upper": format_number(limit.upper),
    }
    ET.SubElement(parent, "limit", attrib=attrib)


def _add_safety_controller(parent: ET.Element, safety: SafetyController) -> None:
    attrib: Dict[str, str] = {
        "soft_lower_limit": format_number(safety.soft_lower_limit),
        "soft_upper_limit": format_number(safety.soft_upper_limit),
        "k_position": format_number(safety.k_position),
        "k_velocity": format_number(safety.k_velocity),
    }
    ET.SubElement(parent, "safety_controller", attrib=attrib)


def joint_to_element(joint: Joint) -> ET.Element:
    """
    EN: <joint> children: origin, parent, child, axis, calibration, dynamics, limit, safety_controller.
    CN: <joint> 子元素顺序：origin、parent、child、axis、calibration、dynamics、limit、safety_controller。
    """
    elem = ET.Element("joint", attrib={"name": joint.name, "type": joint.joint_type.tag})
    _add_origin(elem, joint.origin)
    ET.SubElement(elem, "parent", attrib={"link": joint.parent})
    ET.SubElement(elem, "child", attrib={"link": joint.child})
    if joint.axis is not None:
        ET.SubElement(elem, "axis", attrib={"xyz": _vec3(joint.axis)})
    if joint.calibration is not None:
        _add_calibration(elem, joint.calibration)
    if joint.dynamics is not None:
        _add_dynamics(elem, joint.dynamics)
    if joint.limit is not None:
        _add_limit(elem, joint.limit)
    if joint.safety_controller is not None:
        _add_safety_controller(elem, joint.safety_controller)
    return elem


def robot_to_element(robot: Robot) -> ET.Element:
    root = ET.Element("robot", attrib={"name": robot.name})
    for link in robot.links:
        root.append(link_to_element(link))
    for joint in robot.joints:
        root.append(joint_to_element(joint))
    return root


# =============================================================================
# Document rendering / writing
# 文档生成 / 写出
# =============================================================================
def render_urdf(robot: Robot, timestamp: Optional[datetime] = None) -> bytes:
    """
    EN: Validate the model and render the full pretty-printed document (UTF-8 bytes).
    CN: 校验模型并生成完整的缩进格式文档（UTF-8 字节串）。
    """
    robot.validate()
    stamp = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)

    rough = ET.tostring(robot_to_element(robot), encoding="utf-8")
    doc = minidom.parseString(rough)
    doc.insertBefore(doc.createComment(f" Exported at {stamp} "), doc.documentElement)
    pretty = doc.toprettyxml(indent="  ", encoding="utf-8").decode("utf-8")
    pretty = re.sub(r"\n\s*\n", "\n", pretty)
    return pretty.encode("utf-8")


def _target_mode(out_path: Path) -> int:
    """
    EN: Keep the mode of an existing target; new files get 0o666 minus the umask.
    CN: 已有目标文件沿用其权限；新文件使用 0o666 去掉 umask 后的权限。
    """
    try:
        return stat.S_IMODE(os.stat(str(out_path)).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _replace_atomically(data: bytes, out_path: Path) -> None:
    mode = _target_mode(out_path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{out_path.name}.", suffix=".tmp", dir=str(out_path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        # mkstemp creates 0o600
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, str(out_path))
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def write_urdf(robot: Robot, urdf_path: Union[str, Path], timestamp: Optional[datetime] = None) -> Path:
    """
    EN: Write `robot` to `urdf_path`, overwriting any existing file.
    CN: 将 robot 写入 urdf_path，若文件已存在则直接覆盖。
    """
    out_path = Path(urdf_path)
    data = render_urdf(robot, timestamp)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        _replace_atomically(data, out_path)
    except OSError as e:
        raise DocumentWriteError(f"Failed to write URDF '{out_path}': {e}") from e

    logger.info("Saved URDF: %s (links=%d, joints=%d)", str(out_path), len(robot.links), len(robot.joints))
    return out_path
