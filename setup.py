# setup.py
from setuptools import setup, find_packages

setup(
    name="notegraph",
    version="0.1.0",
    description="Layout, clustering, analytics and render optimisation for note graphs",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "build",
            "dist",
        )
    ),
    install_requires=[
        "numpy",
        "networkx>=3.0",
        "scikit-learn",
        "pandas",
        "fastapi",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    python_requires=">=3.10",
)
