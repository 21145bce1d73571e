# -*- coding: utf-8 -*-
"""
Entity model of a URDF robot description.

EN:
- Value types (Vector3, Rgba, InertiaTensor) are frozen dataclasses.
- Shapes form a closed union {Box, Cylinder, Sphere, Mesh}; the serializer
  dispatches on the concrete type.
- Links and joints refer to each other by link name only. The Robot owns both
  sequences and keeps a name index, so copying or mirroring a link never drags
  its parent object along.

CN:
- 值类型（Vector3、Rgba、InertiaTensor）均为不可变 dataclass。
- 几何形状为封闭联合类型 {Box, Cylinder, Sphere, Mesh}，由序列化器按具体类型分派。
- Link 与 Joint 之间只通过 link 名称相互引用；Robot 持有两个序列并维护名称索引，
  因此复制或镜像 link 时不会连带复制其父对象。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ModelIntegrityError


# =============================================================================
# Value types
# 值类型
# =============================================================================
@dataclass(frozen=True)
class Vector3:
    """EN: Immutable 3-vector (also used for roll/pitch/yaw). CN: 不可变三维向量（也用于 rpy）。"""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def of(values: Sequence[float]) -> "Vector3":
        if len(values) != 3:
            raise ValueError(f"Expected 3 components, got {len(values)}")
        return Vector3(float(values[0]), float(values[1]), float(values[2]))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def as_array(self) -> np.ndarray:
        return np.array(self.as_tuple(), dtype=float)

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3.of(self.as_array() + other.as_array())

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3.of(self.as_array() - other.as_array())

    def mirrored_y(self) -> "Vector3":
        """EN: Reflect about the XZ plane. CN: 关于 XZ 平面镜像（y 取反）。"""
        return Vector3(self.x, -self.y, self.z)


ZERO = Vector3()


@dataclass(frozen=True)
class Rgba:
    """
    EN: Raw RGBA color. Values are kept as given (0-255 or 0-1), never normalized.
    CN: 原始 RGBA 颜色，保留输入值（0-255 或 0-1），不做归一化。
    """

    r: float
    g: float
    b: float
    a: float

    @staticmethod
    def of(values: Sequence[float]) -> "Rgba":
        if len(values) != 4:
            raise ValueError(f"Expected 4 color components, got {len(values)}")
        return Rgba(float(values[0]), float(values[1]), float(values[2]), float(values[3]))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


@dataclass(frozen=True)
class InertiaTensor:
    """
    EN:
    Symmetric 3x3 inertia tensor stored as the canonical 6-vector
    [Ixx, Ixy, Ixz, Iyy, Iyz, Izz]. Vector index i maps to matrix positions
    (0,0) (0,1) (0,2) (1,1) (1,2) (2,2) and their transposes.

    CN:
    对称 3x3 惯性张量，按规范 6 元向量 [Ixx, Ixy, Ixz, Iyy, Iyz, Izz] 存储，
    向量下标依次对应矩阵位置 (0,0) (0,1) (0,2) (1,1) (1,2) (2,2) 及其转置位置。
    """

    ixx: float
    ixy: float
    ixz: float
    iyy: float
    iyz: float
    izz: float

    @staticmethod
    def from_vector(values: Sequence[float]) -> "InertiaTensor":
        if len(values) != 6:
            raise ValueError(f"Inertia vector must have 6 components, got {len(values)}")
        return InertiaTensor(*(float(v) for v in values))

    @staticmethod
    def from_matrix(matrix: Union[np.ndarray, Sequence[Sequence[float]]]) -> "InertiaTensor":
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError(f"Inertia matrix must be 3x3, got shape {m.shape}")
        if not np.array_equal(m, m.T):
            raise ValueError("Inertia matrix is not symmetric")
        return InertiaTensor(
            float(m[0, 0]),
            float(m[0, 1]),
            float(m[0, 2]),
            float(m[1, 1]),
            float(m[1, 2]),
            float(m[2, 2]),
        )

    def as_vector(self) -> Tuple[float, float, float, float, float, float]:
        return (self.ixx, self.ixy, self.ixz, self.iyy, self.iyz, self.izz)

    def as_matrix(self) -> np.ndarray:
        return np.array(
            [
                [self.ixx, self.ixy, self.ixz],
                [self.ixy, self.iyy, self.iyz],
                [self.ixz, self.iyz, self.izz],
            ],
            dtype=float,
        )

    def mirrored(self) -> "InertiaTensor":
        """
        EN: Reflection about the XZ plane: the xy/yx and yz/zy terms change sign.
        CN: 关于 XZ 平面镜像：xy/yx 与 yz/zy 项取反，对角项与 xz 项不变。
        """
        return InertiaTensor(self.ixx, -self.ixy, self.ixz, self.iyy, -self.iyz, self.izz)


@dataclass(frozen=True)
class Origin:
    """
    EN: Optional xyz and rpy; either may be absent. Absent parts render as zero.
    CN: 可选的 xyz 与 rpy，二者可独立缺省；缺省部分输出为 0。
    """

    xyz: Optional[Vector3] = None
    rpy: Optional[Vector3] = None

    @property
    def is_empty(self) -> bool:
        return self.xyz is None and self.rpy is None

    def resolved(self) -> Tuple[Vector3, Vector3]:
        return (self.xyz or ZERO, self.rpy or ZERO)

    def mirrored_y(self) -> "Origin":
        if self.xyz is None:
            return self
        return Origin(xyz=self.xyz.mirrored_y(), rpy=self.rpy)


# =============================================================================
# Shapes (closed union)
# 几何形状（封闭联合类型）
# =============================================================================
@dataclass(frozen=True)
class Box:
    size: Vector3


@dataclass(frozen=True)
class Cylinder:
    radius: float
    length: float


@dataclass(frozen=True)
class Sphere:
    radius: float


@dataclass(frozen=True)
class Mesh:
    filename: str
    scale: float = 1.0


Shape = Union[Box, Cylinder, Sphere, Mesh]


# =============================================================================
# Link attachments
# Link 附属记录
# =============================================================================
@dataclass(frozen=True)
class Material:
    name: str
    rgba: Rgba


@dataclass(frozen=True)
class Inertial:
    mass: float
    inertia: InertiaTensor
    origin: Origin = field(default_factory=Origin)


@dataclass(frozen=True)
class Visual:
    shape: Shape
    origin: Origin = field(default_factory=Origin)
    material: Optional[Material] = None


@dataclass(frozen=True)
class Collision:
    shape: Shape
    origin: Origin = field(default_factory=Origin)


# =============================================================================
# Joint attachments
# Joint 附属记录
# =============================================================================
class JointType(Enum):
    """EN: URDF joint types with their lowercase tags. CN: URDF 关节类型及其小写标签。"""

    REVOLUTE = "revolute"
    CONTINUOUS = "continuous"
    PRISMATIC = "prismatic"
    FIXED = "fixed"
    FLOATING = "floating"
    PLANAR = "planar"

    @property
    def tag(self) -> str:
        return self.value

    @classmethod
    def from_tag(cls, tag: str) -> "JointType":
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown joint type '{tag}' (expected one of: {valid})") from None


class CalibrationEdge(Enum):
    RISING = "rising"
    FALLING = "falling"


@dataclass(frozen=True)
class Calibration:
    """EN: Calibration edge with its threshold. CN: 标定边沿及其阈值。"""

    edge: CalibrationEdge
    value: float = 0.0

    @property
    def tag(self) -> str:
        return self.edge.value

    @staticmethod
    def rising(value: float = 0.0) -> "Calibration":
        return Calibration(CalibrationEdge.RISING, value)

    @staticmethod
    def falling(value: float = 0.0) -> "Calibration":
        return Calibration(CalibrationEdge.FALLING, value)


@dataclass(frozen=True)
class Limit:
    effort: float
    velocity: float
    lower: float
    upper: float


@dataclass(frozen=True)
class Dynamics:
    damping: float
    friction: float


@dataclass(frozen=True)
class SafetyController:
    soft_lower_limit: float
    soft_upper_limit: float
    k_position: float
    k_velocity: float


DEFAULT_LIMIT = Limit(effort=1.0, velocity=30.0, lower=0.0, upper=180.0)
LIMITED_JOINT_TYPES = (JointType.REVOLUTE, JointType.PRISMATIC)


# =============================================================================
# Entities
# 实体
# =============================================================================
@dataclass
class Link:
    """
    EN: A rigid body. `parent` is the parent link's name, never the object itself.
    CN: 刚体节点。`parent` 为父 link 的名称，而不是对象引用。
    """

    name: str
    parent: Optional[str] = None
    inertial: Optional[Inertial] = None
    visual: Optional[Visual] = None
    collision: Optional[Collision] = None
    collision_group: List[Collision] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None


@dataclass
class Joint:
    """
    EN: Directed edge parent -> child. Revolute/prismatic joints get DEFAULT_LIMIT unless given one.
    CN: 从 parent 指向 child 的有向边；revolute/prismatic 关节若未指定 limit 则使用 DEFAULT_LIMIT。
    """

    name: str
    joint_type: JointType
    parent: str
    child: str
    origin: Origin = field(default_factory=Origin)
    axis: Optional[Vector3] = None
    calibration: Optional[Calibration] = None
    dynamics: Optional[Dynamics] = None
    limit: Optional[Limit] = None
    safety_controller: Optional[SafetyController] = None

    def __post_init__(self) -> None:
        if self.limit is None and self.joint_type in LIMITED_JOINT_TYPES:
            self.limit = DEFAULT_LIMIT


@dataclass
class Robot:
    """
    EN:
    Owner of the link and joint sequences. Insertion order is the output order.
    Use add_link/add_joint to grow the model; both enforce the reference rules.

    CN:
    持有 link 与 joint 序列，插入顺序即输出顺序。
    通过 add_link/add_joint 扩充模型，二者都会检查引用约束。
    """

    name: str
    links: List[Link] = field(default_factory=list)
    joints: List[Joint] = field(default_factory=list)
    _link_index: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        links, joints = self.links, self.joints
        self.links, self.joints = [], []
        for link in links:
            self.add_link(link)
        for joint in joints:
            self.add_joint(joint)

    # -------------------------
    # Mutation
    # 修改
    # -------------------------
    def add_link(self, link: Link) -> Link:
        if link.name in self._link_index:
            raise ModelIntegrityError(f"Duplicate link name: '{link.name}'")
        if link.parent is not None:
            if link.parent == link.name:
                raise ModelIntegrityError(f"Link '{link.name}' cannot be its own parent")
            if link.parent not in self._link_index:
                raise ModelIntegrityError(f"Parent link '{link.parent}' of '{link.name}' is not in robot '{self.name}'")
        self._link_index[link.name] = len(self.links)
        self.links.append(link)
        return link

    def add_joint(self, joint: Joint) -> Joint:
        for role, ref in (("parent", joint.parent), ("child", joint.child)):
            if ref not in self._link_index:
                raise ModelIntegrityError(f"Joint '{joint.name}' {role} link '{ref}' is not in robot '{self.name}'")
        if joint.parent == joint.child:
            raise ModelIntegrityError(f"Joint '{joint.name}' has identical parent and child '{joint.parent}'")
        self.joints.append(joint)
        return joint

    # -------------------------
    # Queries
    # 查询
    # -------------------------
    def has_link(self, name: str) -> bool:
        return name in self._link_index

    def get_link(self, name: str) -> Optional[Link]:
        idx = self._link_index.get(name)
        return None if idx is None else self.links[idx]

    def joint_for_child(self, child: str) -> Optional[Joint]:
        for joint in self.joints:
            if joint.child == child:
                return joint
        return None

    def root_links(self) -> List[Link]:
        return [link for link in self.links if link.is_root]

    def children_of(self, name: str) -> List[Link]:
        return [link for link in self.links if link.parent == name]

    def validate(self) -> None:
        """
        EN: Re-check every structural invariant over the current sequences.
        CN: 基于当前序列重新检查全部结构约束。
        """
        seen: Dict[str, int] = {}
        for i, link in enumerate(self.links):
            if link.name in seen:
                raise ModelIntegrityError(f"Duplicate link name: '{link.name}'")
            seen[link.name] = i
        for link in self.links:
            if link.parent is not None and (link.parent == link.name or link.parent not in seen):
                raise ModelIntegrityError(f"Link '{link.name}' has dangling parent '{link.parent}'")
        for joint in self.joints:
            if joint.parent not in seen or joint.child not in seen:
                raise ModelIntegrityError(
                    f"Joint '{joint.name}' references missing link(s): parent='{joint.parent}', child='{joint.child}'"
                )
            if joint.parent == joint.child:
                raise ModelIntegrityError(f"Joint '{joint.name}' has identical parent and child '{joint.parent}'")
        self._link_index = seen
