# setup.py
from setuptools import setup, find_packages

setup(
    name="schedfind",
    version="0.1.0",
    description="Infer recurring payment schedules from a transaction ledger",
    packages=find_packages(include=["schedule_finder", "schedule_finder.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "python-dateutil>=2.8",
        "python-dotenv>=0.19",
        "anyio>=3.0",
        "mcp>=1.0,<2",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "schedfind=schedule_finder.cli:main",
            "schedfind-mcp=schedule_finder.mcp_server:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
