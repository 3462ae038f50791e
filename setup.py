"""
Setup script for pid-sync: P&ID diagram editor core kept in sync with a Neo4j plant graph
"""

from setuptools import setup, find_packages

setup(
    name="pid-sync",
    version="1.0.0",
    description="P&ID diagram topology engine and Neo4j graph persistence",
    long_description="Diagram topology engine (pipe splicing, instrument taps, routing exclusions) and lossless graph persistence for piping and instrumentation diagrams",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["tests*", "docs*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "neo4j>=5.13.0",
        "pydantic>=2.11.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",

        # Geometry
        "numpy>=1.24.0",

        # API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pid-sync=pidsync.__main__:main",
        ],
    },
    package_data={
        "pidsync.services.shape_catalog": ["shapes/*.json"],
    },
    include_package_data=True,
    author="P&ID Sync Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="pid piping-instrumentation diagram neo4j knowledge-graph",
)
