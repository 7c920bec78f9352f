#!/usr/bin/env python
"""Setup script for Project Risk Simulator."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="project-risk-simulator",
    version="1.0.0",
    author="Project Risk Simulator Team",
    description="Monte Carlo schedule and budget risk simulator for projects",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["risk_simulator", "risk_simulator.*"]),
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Topic :: Office/Business :: Scheduling",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "numba>=0.58.0",
        "openpyxl>=3.1.0",
        "pydantic>=2.0.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "scipy>=1.10.0",
        ],
        "dev": [
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    entry_points={
        "console_scripts": [
            "risk-sim=risk_simulator.cli:app",
        ],
    },
)
