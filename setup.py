# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="pendant",
    version="0.2.0",
    description="Runtime-context aware luau-lsp analysis for Rojo projects",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["pendant*"]),
    python_requires=">=3.11",
    install_requires=[
        "requests",
        "watchdog",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'pendant=pendant.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
