#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
cad2urdf - CAD body records to URDF conversion tool

This tool builds a URDF robot description from a JSON list of rigid bodies
exported from a CAD assembly (name, parent, mass, center of mass, inertia, origin).

Workflow:
1) Load the body file and the optional JSON config (-j/--json-config)
2) Infer links/joints from the naming convention and mirror "_R" bodies to "_L"
3) Write the URDF to -o/--output

Examples:
    cad2urdf bodies.json -o robot.urdf -n HuboPlus
    cad2urdf bodies.json -o robot.urdf -j config.json --strict
    cad2urdf bodies.json -o robot.urdf --collision box --mesh-dir ./meshes
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import COLLISION_MODES, ConverterConfig
from .converter import load_bodies_file
from .errors import Cad2UrdfError
from .inference import KinematicInference
from .serializer import write_urdf

# Logger for this module
# 本模块日志记录器
logger = logging.getLogger("cad2urdf.cli")


# ----------------------------
# Logging helpers
# 日志配置辅助函数
# ----------------------------
def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure global logging style for the whole package.

    配置整个包的全局日志风格（由 CLI 统一设置，子模块仅 getLogger 不自行 basicConfig）。
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        # Fallback to INFO if user passes an invalid level
        # 若用户输入非法等级，则回退到 INFO
        numeric_level = logging.INFO

    fmt = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        handlers.append(file_handler)

    # NOTE: force=True ensures reconfiguration even if other libs touched logging.
    # 注意：force=True 可确保即便其他库提前配置过 logging，这里也能强制统一。
    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)


def log_step_header(step_idx: int, total_steps: int, title: str) -> None:
    """
    Print a unified step header.

    打印统一的步骤分隔标题。
    """
    bar = "=" * 72
    logger.info(bar)
    logger.info("[STEP %d/%d] %s", step_idx, total_steps, title)
    logger.info(bar)


# ----------------------------
# CLI entry
# 命令行入口
# ----------------------------
def build_parser() -> argparse.ArgumentParser:
    """
    Build CLI argument parser.

    构建命令行参数解析器。
    """
    parser = argparse.ArgumentParser(
        prog="cad2urdf",
        description="cad2urdf - CAD body records to URDF conversion tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("input", help="Input body file (JSON)")

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output URDF file path (overwritten if it exists)",
    )

    parser.add_argument(
        "-n", "--name",
        default=None,
        help="Robot name (default: body file 'robot_name', then config, then 'robot')",
    )

    parser.add_argument(
        "-j", "--json-config",
        help="JSON configuration file path",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a parented body has no joint code in its name",
    )

    parser.add_argument(
        "--no-mirror",
        action="store_true",
        help="Do not synthesize mirrored '_L' bodies from '_R' bodies",
    )

    parser.add_argument(
        "--body-pattern",
        default=None,
        help="Only convert bodies whose name matches this regex (e.g. '^Body_')",
    )

    parser.add_argument(
        "--collision",
        choices=list(COLLISION_MODES),
        default=None,
        help="Collision geometry: none, mesh (reuse visual), box or sphere (fit to --mesh-dir meshes)",
    )

    parser.add_argument(
        "--mesh-dir",
        default=None,
        help="Directory holding <link>.stl meshes for box/sphere collisions",
    )

    # Logging options
    # 日志选项
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level: DEBUG, INFO, WARNING, ERROR (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (write logs to file in addition to stdout)",
    )

    return parser


def apply_overrides(cfg: ConverterConfig, args: argparse.Namespace) -> ConverterConfig:
    """
    Apply command line switches on top of the JSON config.

    将命令行开关覆盖到 JSON 配置之上。
    """
    if args.strict:
        cfg.joint_name_policy = "strict"
    if args.no_mirror:
        cfg.mirror.enabled = False
    if args.body_pattern:
        cfg.body_pattern = args.body_pattern
    if args.collision:
        cfg.collision.mode = args.collision
    if args.mesh_dir:
        cfg.collision.mesh_dir = args.mesh_dir
    return cfg


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function - parse command line arguments and execute the conversion pipeline.

    主函数：解析命令行参数并执行完整转换流程。
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, log_file=args.log_file)

    input_path = Path(args.input)
    output_path = Path(args.output)
    total_steps = 3

    # Step 1: load inputs
    log_step_header(1, total_steps, "Load body records and configuration")
    try:
        cfg = apply_overrides(ConverterConfig.load(args.json_config), args)
        file_name, records = load_bodies_file(input_path)
    except (Cad2UrdfError, OSError, ValueError) as e:
        logger.error("Input loading failed: %s", e, exc_info=True)
        sys.exit(1)
    robot_name = args.name or file_name or cfg.robot_name

    # Step 2: kinematic inference
    log_step_header(2, total_steps, "Infer kinematic tree")
    try:
        result = KinematicInference(cfg, robot_name).infer(records)
    except (Cad2UrdfError, OSError, ValueError) as e:
        logger.error("Kinematic inference failed: %s", e, exc_info=True)
        sys.exit(1)

    # Step 3: write URDF
    log_step_header(3, total_steps, "Write URDF")
    try:
        write_urdf(result.robot, output_path)
    except (Cad2UrdfError, OSError, ValueError) as e:
        logger.error("URDF writing failed: %s", e, exc_info=True)
        sys.exit(1)

    # Summary
    # 汇总信息
    bar = "=" * 72
    logger.info(bar)
    logger.info("Pipeline completed.")
    logger.info("Robot      : %s", result.robot.name)
    logger.info("Links      : %d", len(result.robot.links))
    logger.info("Joints     : %d", len(result.robot.joints))
    logger.info("Mirrored   : %d", len(result.mirrored))
    logger.info("Warnings   : %d", len(result.warnings))
    logger.info("Input      : %s", input_path)
    logger.info("Output URDF: %s", output_path)
    if args.json_config:
        logger.info("JSON config: %s", args.json_config)
    logger.info(bar)


if __name__ == "__main__":
    main()
