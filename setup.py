"""
Setup script for the Hash Ripper package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="hash-ripper",
    version="0.1.0",
    author="Hash Ripper Team",
    author_email="example@example.com",
    description="Resumable, time-sliced digest plaintext recovery",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/example/hash-ripper",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Security",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pycryptodome>=3.10.0",
        "tqdm>=4.50.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hash-ripper=hash_ripper.cli:main",
        ],
    },
)
