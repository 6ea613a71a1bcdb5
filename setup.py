from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="vgraph",
    version="0.1.0",
    description="Graph engine for an interactive graph visualizer: store, layout and stepwise algorithms.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"vgraph.schemas": ["graph.json"]},
    python_requires=">=3.11",
    install_requires=[
        "networkx",
        "numpy",
        "PyYAML",
        "jsonschema",
    ],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["vgraph=vgraph.cli:main"]},
)
