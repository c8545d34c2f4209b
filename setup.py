#!/usr/bin/env python
"""Setup configuration for trialforms."""

from setuptools import find_packages, setup

setup(
    name="trialforms",
    version="1.0.0",
    description="Validation and submission engine for clinical trial data-capture forms",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
)
