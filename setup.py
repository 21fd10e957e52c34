"""
jackc Package Setup

Install with: pip install -e .
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding='utf-8')

setup(
    name="jackc",
    version="0.1.0",
    author="jackc Team",
    description="Single-pass compiler from Jack classes to stack VM code",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["jackc", "jackc.*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=22.0",
            "mypy>=0.900",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Education",
        "Topic :: Software Development :: Compilers",
    ],
    keywords="compiler, jack, nand2tetris, vm, recursive-descent",
    entry_points={
        "console_scripts": [
            "jackc=jackc.cli:main",
        ],
    },
)
