"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/zackees/ninjaforge"
KEYWORDS = "c++ cpp build-system ninja compiler toolchain msvc gcc clang"
HERE = os.path.dirname(os.path.abspath(__file__))


def read_version() -> str:
    with open(os.path.join(HERE, "src", "ninjaforge", "__init__.py"), encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=", 1)[1].strip().strip('"')
    raise RuntimeError("Unable to find __version__")


if __name__ == "__main__":
    setup(
        name="ninjaforge",
        version=read_version(),
        description="Declarative C++ builds compiled into ninja build scripts",
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["ninjaforge=ninjaforge.cli:main"]},
        include_package_data=True)
