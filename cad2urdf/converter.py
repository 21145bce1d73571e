# -*- coding: utf-8 -*-
"""
Body records -> URDF pipeline.

Public interface / 对外接口:
    convert_records(records, urdf_path, cfg=None, robot_name=None) -> InferenceResult
    cad_to_urdf(bodies_path, urdf_path, json_config_path=None, robot_name=None) -> InferenceResult

Body file format / 刚体文件格式:
    [ {"name": "Body_RHY:1", "parent": null, "mass": 2.0,
       "center_of_mass": [0, 0, 0], "inertia": [Ixx, Iyy, Izz, Ixy, Iyz, Ixz],
       "origin": [0, 0, 0]}, ... ]
    or {"robot_name": "...", "bodies": [ ... ]}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .config import ConverterConfig
from .errors import MalformedInputError
from .inference import BodyRecord, InferenceResult, KinematicInference, load_body_records
from .serializer import write_urdf

logger = logging.getLogger("cad2urdf.converter")


def load_bodies_file(bodies_path: Union[str, Path]) -> Tuple[Optional[str], List[BodyRecord]]:
    """
    EN: Read a body file; returns (robot name from the file or None, records).
    CN: 读取刚体文件，返回（文件中的机器人名或 None，记录列表）。
    """
    p = Path(bodies_path)
    if not p.exists():
        raise FileNotFoundError(f"Body file does not exist: {p}")

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Body file is not valid JSON: {p}: {e}") from e

    robot_name: Optional[str] = None
    if isinstance(raw, dict):
        robot_name = raw.get("robot_name")
        raw = raw.get("bodies")
    if not isinstance(raw, list):
        raise MalformedInputError(f"Body file must hold a list of bodies (or an object with 'bodies'): {p}")

    records = load_body_records(raw)
    logger.info("Loaded body file: file='%s', bodies=%d", str(p), len(records))
    return robot_name, records


def convert_records(
    records: Sequence[BodyRecord],
    urdf_path: Union[str, Path],
    cfg: Optional[ConverterConfig] = None,
    robot_name: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> InferenceResult:
    """
    EN: Infer the robot from `records` and write it to `urdf_path`.
    CN: 从 records 推断机器人模型并写入 urdf_path。
    """
    result = KinematicInference(cfg, robot_name).infer(records)
    write_urdf(result.robot, urdf_path, timestamp=timestamp)
    return result


def cad_to_urdf(
    bodies_path: Union[str, Path],
    urdf_path: Union[str, Path],
    json_config_path: Optional[Union[str, Path]] = None,
    robot_name: Optional[str] = None,
    cfg: Optional[ConverterConfig] = None,
) -> InferenceResult:
    """
    EN: Robot name precedence: argument > body file > config > "robot".
    CN: 机器人名优先级：参数 > 刚体文件 > 配置 > "robot"。
    """
    if cfg is None:
        cfg = ConverterConfig.load(json_config_path)
    file_name, records = load_bodies_file(bodies_path)
    name = robot_name or file_name or cfg.robot_name

    logger.info("URDF generation started: bodies='%s', urdf='%s', robot='%s'", str(bodies_path), str(urdf_path), name)
    return convert_records(records, urdf_path, cfg=cfg, robot_name=name)
