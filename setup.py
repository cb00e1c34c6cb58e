"""
setup.py for the stochmatch Python package.

The package lives under ``python/``; install from the repository root:
    pip install -e ".[dev]"
"""

from setuptools import find_packages, setup

setup(
    name="stochmatch",
    version="0.1.0",
    description="Two-stage stochastic liability matching with VSS and out-of-sample tracking",
    package_dir={"": "python"},
    packages=find_packages("python"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
        "pandas>=1.3",
        "loguru>=0.7",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "hypothesis>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "stochmatch=stochmatch.cli:main",
        ],
    },
)
