from setuptools import setup, find_packages

setup(
    name="metmodule",
    version="0.1",
    description="Metabolic graph construction and scoring for the COBRApy framework",
    long_description=("Metabolic graph construction and scoring for the COBRApy framework, joining differential gene "
                      "and metabolite data onto atom- or metabolite-level reaction networks and preparing them for "
                      "maximum weight connected subgraph solvers"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.8",
    packages=find_packages(include=["metmodule", "metmodule.*"]),
    install_requires=["cobra", "networkx", "numpy", "pandas", "scipy", "matplotlib"],
    extras_require={"test": ["pytest", "pytest-timeout"]},
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Bio-Informatics"
    ],
    keywords=["metabolism", "atom mapping", "differential expression", "maximum weight connected subgraph"],
    zip_safe=False,
)
