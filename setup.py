"""
Setup file.
"""

import os

from setuptools import find_packages, setup

KEYWORDS = "embedded avr avr-libc bindgen rust build-script microcontroller"
HERE = os.path.dirname(os.path.abspath(__file__))

INSTALL_REQUIRES = [
    "requests>=2.28",
    "tqdm>=4.64",
]

TEST_REQUIRES = [
    "pytest>=7.0",
]


if __name__ == "__main__":
    setup(
        name="avrlibc-build",
        version="0.1.0",
        description="Builds avr-libc and generates Rust bindings for its headers",
        keywords=KEYWORDS,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=INSTALL_REQUIRES,
        extras_require={"test": TEST_REQUIRES},
        entry_points={"console_scripts": ["avrlibc=avrlibc.cli:main"]},
        include_package_data=True)
