# -*- coding: utf-8 -*-
"""
Naming-convention adapter.

EN:
CAD bodies follow a convention like "Body_RHP:1":
- ":1" is an occurrence qualifier and is dropped from the link name.
- "RHP" is a 3-letter joint code: body side [LRTH], joint class
  [HSKAEWNRPYBD], rotation axis [RPY]. The code is matched case-insensitively,
  but only an uppercase axis letter maps to an axis.
- "_R" marks the canonical right half of a mirrored pair.
The axis/type decision itself lives in an explicit table (AXIS_TABLE plus the
per-code overrides of the config); this module only turns names into keys for
that table.

CN:
CAD 刚体遵循类似 "Body_RHP:1" 的命名约定：
- ":1" 为实例限定符，生成 link 名称时去掉。
- "RHP" 为 3 字母关节代码：身体侧 [LRTH]、关节类别 [HSKAEWNRPYBD]、旋转轴 [RPY]；代码匹配不区分大小写，但只有大写轴字母才对应关节轴。
- "_R" 表示镜像对中的右半部分（规范侧）。
轴/类型的判定由显式映射表完成（AXIS_TABLE 加配置中的逐代码覆盖），本模块只负责把名称转换为查表用的键。
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Pattern

from .model import Vector3

JOINT_CODE_PATTERN: Pattern[str] = re.compile(r"[LRTH][HSKAEWNRPYBD][RPY]", re.IGNORECASE)
OCCURRENCE_SEPARATOR = ":"

# Rotation-axis letter -> joint axis
AXIS_TABLE: Dict[str, Vector3] = {
    "R": Vector3(1.0, 0.0, 0.0),
    "P": Vector3(0.0, 1.0, 0.0),
    "Y": Vector3(0.0, 0.0, 1.0),
}


def normalize_occurrence_name(occurrence_name: str) -> str:
    """
    EN: "Body_RHP:1" -> "Body_RHP".
    CN: 去掉 ":" 之后的实例限定符。
    """
    return occurrence_name.split(OCCURRENCE_SEPARATOR, 1)[0]


def match_joint_code(link_name: str) -> Optional[str]:
    """EN: First 3-letter joint code in the name, or None. CN: 返回名称中第一个关节代码，未匹配返回 None。"""
    m = JOINT_CODE_PATTERN.search(link_name)
    return m.group(0) if m else None


def axis_for_joint_name(joint_name: str) -> Optional[Vector3]:
    """
    EN: Axis from the last character of the joint name (uppercase R/P/Y only); anything else leaves it unset.
    CN: 由关节名最后一个字符决定轴（仅大写 R/P/Y）；其他字符不设置轴。
    """
    if not joint_name:
        return None
    return AXIS_TABLE.get(joint_name[-1])


def matches_body_pattern(link_name: str, pattern: Optional[str]) -> bool:
    if not pattern:
        return True
    return re.search(pattern, link_name, re.IGNORECASE) is not None


# -------------------------
# Side designators
# 左右侧标识
# -------------------------
def is_mirror_source(link_name: str, source_token: str = "_R") -> bool:
    return source_token in link_name


def mirror_link_name(link_name: str, source_token: str = "_R", target_token: str = "_L") -> str:
    """EN: "Body_RHP" -> "Body_LHP" (first designator only). CN: 只替换第一个侧标识。"""
    return link_name.replace(source_token, target_token, 1)


def mirror_joint_name(
    joint_name: str,
    source_token: str = "_R",
    target_token: str = "_L",
) -> str:
    """
    EN:
    Swap the side letter of a joint code ("RHP" -> "LHP", case preserved).
    Names that are not joint codes (e.g. a link name used as joint name) get
    the link-name substitution instead.

    CN:
    替换关节代码中的侧字母（"RHP" -> "LHP"，保留大小写）。
    非关节代码的名称（如以 link 名作关节名）则按 link 名规则替换。
    """
    src = source_token.lstrip("_")[:1]
    dst = target_token.lstrip("_")[:1]
    if len(joint_name) == 3 and JOINT_CODE_PATTERN.fullmatch(joint_name) and src and joint_name[0].upper() == src.upper():
        side = dst.upper() if joint_name[0].isupper() else dst.lower()
        return side + joint_name[1:]
    return mirror_link_name(joint_name, source_token, target_token)
