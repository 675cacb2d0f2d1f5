"""
Setup script for mongrep.

Allows development installation with `pip install -e .`
Test dependencies: `pip install -e .[test]`
"""

from setuptools import setup, find_packages

setup(
    name="mongrep",
    version="0.1.0",
    description="Repository pattern and query composition on top of pymongo",
    packages=find_packages(include=["mongrep", "mongrep.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pymongo>=4.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "inflection>=0.5",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
