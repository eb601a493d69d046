from setuptools import find_packages, setup
from pathlib import Path

setup(
    name="linked_annotation",
    version=Path("./linked_annotation/VERSION").read_text().strip(),
    description="Link bounding boxes on an image with highlighted spans of text",
    packages=find_packages(include=["linked_annotation", "linked_annotation.*"]),
    package_data={"linked_annotation": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python",
        "easydict",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "linked_annotation=linked_annotation.cli:main",
        ],
    },
)
