"""
Packaging for the Universal Law Observatory.
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

setup(
    name="universal-law-observatory",
    version="0.1.0",
    author="Observatory Team",
    description="Self-adaptive research platform simulation: gravitational resource allocation, bounded metrics and explainable cross-domain patterns",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["observatory", "observatory.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=6.0",
        "pydantic>=2.0.0",
        "numpy>=1.24.0",
        "tqdm>=4.65.0",
        "networkx>=3.0",
    ],
    extras_require={
        "dev": [
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
        "test": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "observatory=observatory.session.cli:main",
        ],
    },
)
