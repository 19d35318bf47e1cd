from pathlib import Path

import setuptools

this_directory = Path(__file__).parent
long_description = (this_directory / "README.rst").read_text()

test_dependencies = ["pytest"]


setuptools.setup(
    name="bubblepack",
    version="1.0.0",
    description="Proportional circle packing for bubble charts.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=["bubblepack"],
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="circle packing bubble chart layout force simulation quadtree",
    install_requires=[
        "numpy>=1.18",
        "scipy>=1.14",
        "pandas",
        "tqdm",
        "typer",
    ],
    test_suite="pytest",
    tests_require=test_dependencies,
    extras_require={"test": test_dependencies},
    entry_points={"console_scripts": ["bubblepack=bubblepack.cli:run"]},
)
