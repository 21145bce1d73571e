"""cad2urdf - CAD body records to URDF conversion package

Provides a simple command-line entry point and the core pieces of the
pipeline: kinematic inference, mirror synthesis and URDF serialization.
"""

from .cli import main
from .config import ConverterConfig
from .converter import cad_to_urdf, convert_records
from .inference import BodyRecord, InferenceResult, InferenceWarning, KinematicInference
from .model import Joint, JointType, Link, Robot
from .serializer import render_urdf, write_urdf

__all__ = [
    "main",
    "ConverterConfig",
    "cad_to_urdf",
    "convert_records",
    "BodyRecord",
    "InferenceResult",
    "InferenceWarning",
    "KinematicInference",
    "Joint",
    "JointType",
    "Link",
    "Robot",
    "render_urdf",
    "write_urdf",
]
__version__ = "0.1.0"
__author__ = "cad2urdf Contributors"
