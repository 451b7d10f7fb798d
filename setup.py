from setuptools import setup, find_packages

setup(
    name="crimemap",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "pydantic",
        "pdfplumber",
        "pymongo",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "crimemap=crimemap.cli:main",
        ],
    },
)
