#!/usr/bin/env python3
"""
Setup script for HeadPilot
"""
from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent


def read_requirements():
    """Read install requirements from requirements.txt"""
    lines = (HERE / "requirements.txt").read_text().splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="headpilot",
    version="0.1.0",
    description="Hands-free browser control from head pose and facial expressions",
    packages=find_packages(include=["headpilot", "headpilot.*"]),
    package_data={"headpilot": ["config.default.yaml"]},
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={"console_scripts": ["headpilot=headpilot.main:run"]},
)
