# setup.py

from setuptools import setup, find_namespace_packages

setup(
    name="defi-curve",
    version="1.0.0",
    description="Exact-integer math and deployment-address mining for concentrated two-sided AMM curves",
    author="Your Name",
    license="MIT",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pandas>=1.0.0",
        "matplotlib>=3.0.0",
        "PyYAML>=5.0.0",
        "eth-utils>=2.0.0",
        "eth-abi>=4.0.0",
        "eth-hash[pycryptodome]>=0.3.1",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
