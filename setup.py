"""Setup configuration for cad2urdf package."""

from setuptools import setup, find_packages

setup(
    name="cad2urdf",
    version="0.1.0",
    description="CAD body records to URDF conversion tool with kinematic inference and mirror synthesis",
    author="cad2urdf Contributors",
    url="https://github.com/your-org/cad2urdf",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "trimesh>=3.12.0",
        "numpy>=1.21.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=22.0",
            "isort>=5.0",
            "mypy>=0.990",
            "ruff>=0.0.250",
        ],
    },
    entry_points={
        "console_scripts": [
            "cad2urdf=cad2urdf.cli:main",
        ],
    },
    package_data={
        "cad2urdf": ["py.typed"],
    },
    long_description="Small utility for converting CAD body records to URDF with naming-convention joint inference",
    long_description_content_type="text/plain",
)
