# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="rquote",
    version="0.1.0",
    description="Quoted R-like expression trees: substitution, tree walkers, parse and render",
    python_requires=">=3.9",
    # Subpackages (types, reader, printer, ...) have no __init__.py
    packages=find_namespace_packages(include=["rquote", "rquote.*"]),
    install_requires=[],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)
