from setuptools import setup, find_packages

setup(
    name="connect4-remote",
    version="0.2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "filelock",  # Cross-process locks for the JSON stores
        "flask>=2.0",  # Game server
        "requests",  # Game client
        "urllib3",  # Retry policy for the client session
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "connect4-remote=connect4_remote.interfaces.cli:main",
        ],
    },
)
