"""
Setup configuration for Schema-Mesh project.
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README
README = Path(__file__).parent / "README.md"
long_description = README.read_text() if README.exists() else ""

# Read requirements
REQUIREMENTS = Path(__file__).parent / "requirements.txt"
requirements = []
if REQUIREMENTS.exists():
    with open(REQUIREMENTS) as f:
        requirements = [
            line.strip() for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="schema-mesh",
    version="0.1.0",
    description="Canonical schema model and translators between OWL ontologies and slot/class schemas",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Schema-Mesh Team",
    author_email="",
    packages=find_packages(include=["schema_mesh_*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.11.1",
            "hypothesis>=6.82.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
            "isort>=5.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "schema-mesh=schema_mesh_orchestrator.pipeline:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Software Development :: Code Generators",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
    ],
    keywords="ontology schema owl rdf yaml translation canonical-model",
)
