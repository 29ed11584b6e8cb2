# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="gtree",
    version="2.2.0",
    description="Cycle-safe directory tree renderer with symlink loop detection",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["gtree", "gtree.*"]),
    package_data={
        "gtree.interface.locales": ["*.json"],
    },
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'gtree=gtree.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Environment :: Console",
    ],
)
