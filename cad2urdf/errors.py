# -*- coding: utf-8 -*-
"""
Exception types raised by cad2urdf.

EN: Recoverable lookup failures never raise; they are reported as warnings by
    the inference engine. Everything here is fatal to the current run.
CN: 可恢复的查找失败不会抛出异常，而是由推断引擎作为警告返回；此处的异常都会终止本次转换。
"""

from __future__ import annotations


class Cad2UrdfError(Exception):
    """EN: Base class for all cad2urdf errors. CN: 所有 cad2urdf 异常的基类。"""


class MalformedInputError(Cad2UrdfError, ValueError):
    """
    EN: A body record cannot be accepted (missing field, negative mass, NaN ...).
    CN: 刚体记录无法接受（缺少字段、质量为负、NaN 等）。
    """


class JointNameError(MalformedInputError):
    """EN: No joint code matched in strict mode. CN: 严格模式下未匹配到关节代码。"""


class ModelIntegrityError(Cad2UrdfError, ValueError):
    """
    EN: The entity model violates a structural invariant (duplicate link, dangling reference).
    CN: 实体模型违反结构约束（重复 link、悬空引用）。
    """


class DocumentWriteError(Cad2UrdfError, OSError):
    """EN: The output document could not be written. CN: 输出文档写入失败。"""
