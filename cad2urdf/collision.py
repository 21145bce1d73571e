# -*- coding: utf-8 -*-
"""
Collision geometry synthesis.

EN:
- mesh   : reuse the visual mesh as collision geometry
- box    : axis-aligned bounding box of <mesh_dir>/<link><ext> (loaded with trimesh)
- sphere : sphere around the bounding-box center enclosing every vertex
Meshes are only read, never written.

CN:
- mesh   ：直接复用 visual 网格作为碰撞几何
- box    ：读取 <mesh_dir>/<link><ext>（trimesh），取轴对齐包围盒
- sphere ：以包围盒中心为球心、包含全部顶点的包围球
只读取网格文件，不会写出网格。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import trimesh

from .config import CollisionSettings, MeshSettings
from .model import Box, Collision, Mesh, Origin, Sphere, Vector3, Visual

# IMPORTANT:
# EN: Do NOT call logging.basicConfig() here. CLI configures logging globally.
# CN: 不要在此模块内配置 logging.basicConfig()，由 CLI 统一配置日志风格。
logger = logging.getLogger("cad2urdf.collision")


def _load_mesh(path: Path) -> trimesh.Trimesh:
    """
    EN: Load a mesh file as a single Trimesh (scenes are concatenated).
    CN: 以单个 Trimesh 读取网格文件（场景会被合并）。
    """
    loaded = trimesh.load(str(path), force="mesh", process=False)
    if isinstance(loaded, trimesh.Scene):
        loaded = trimesh.util.concatenate(tuple(loaded.geometry.values()))
    if loaded.is_empty:
        raise ValueError(f"Mesh has no geometry: {path}")
    return loaded


def _offset(origin: Origin, center: np.ndarray) -> Origin:
    base = origin.xyz.as_array() if origin.xyz is not None else np.zeros(3)
    return Origin(xyz=Vector3.of(base + center), rpy=origin.rpy)


class CollisionBuilder:
    """
    EN: Builds one Collision per link from the configured mode.
    CN: 按配置模式为每个 link 生成一个 Collision。
    """

    def __init__(self, settings: CollisionSettings, mesh: MeshSettings):
        self.settings = settings
        self.mesh = mesh
        self.mesh_dir: Optional[Path] = Path(settings.mesh_dir) if settings.mesh_dir else None
        if settings.mode in ("box", "sphere") and self.mesh_dir is None:
            raise ValueError(f"Collision mode '{settings.mode}' requires collision.mesh_dir")

    @property
    def enabled(self) -> bool:
        return self.settings.mode != "none"

    def mesh_path(self, link_name: str) -> Optional[Path]:
        if self.mesh_dir is None:
            return None
        return self.mesh_dir / f"{link_name}{self.mesh.extension}"

    def build(self, link_name: str, visual: Optional[Visual]) -> Optional[Collision]:
        """
        EN: Returns None when the mode is off or the source mesh is missing.
        CN: 模式关闭或源网格缺失时返回 None。
        """
        mode = self.settings.mode
        visual_origin = visual.origin if visual is not None else Origin()

        if mode == "none":
            return None

        if mode == "mesh":
            if visual is None or not isinstance(visual.shape, Mesh):
                return None
            return Collision(shape=visual.shape, origin=visual_origin)

        path = self.mesh_path(link_name)
        if path is None or not path.is_file():
            return None

        mesh = _load_mesh(path)
        if mode == "box":
            lo, hi = mesh.bounds
            extents = (hi - lo) * self.mesh.scale
            center = (hi + lo) / 2.0 * self.mesh.scale
            logger.debug("Box collision: link='%s', extents=%s", link_name, extents.tolist())
            return Collision(shape=Box(size=Vector3.of(extents)), origin=_offset(visual_origin, center))

        if mode == "sphere":
            lo, hi = mesh.bounds
            center = (hi + lo) / 2.0
            radius = float(np.linalg.norm(np.asarray(mesh.vertices) - center, axis=1).max()) * self.mesh.scale
            center = center * self.mesh.scale
            logger.debug("Sphere collision: link='%s', radius=%.6g", link_name, radius)
            return Collision(shape=Sphere(radius=radius), origin=_offset(visual_origin, center))

        raise ValueError(f"Unknown collision mode: {mode}")
