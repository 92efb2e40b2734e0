"""
Setup script for spectralmap

Pure Python package laid out under src/. The version is read from
src/spectralmap/__init__.py so it is defined in one place.
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/spectralmap/__init__.py
def get_version():
    version_file = Path("src/spectralmap/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="spectralmap",
    version=get_version(),
    description="Term co-occurrence matrices, their sparse SVD and term spectra",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="GPL-3.0-or-later",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.22",
        "scipy>=1.8",
        "tomli>=1.1; python_version < '3.11'",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "spectralmap=spectralmap.cli:main",
        ],
    },
    zip_safe=False,
)
