# setup.py
from setuptools import setup, find_packages

setup(
    name="solutiondumper",
    version="1.0.0",
    description="Browse a .NET solution as a checkbox tree and export the selected files as one text dump",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "customtkinter>=5.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'solutiondumper=solutiondumper.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
