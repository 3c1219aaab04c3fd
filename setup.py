from setuptools import find_packages, setup

setup(
    name="fswatcher",
    version="1.0.0",
    description="A directory watcher that logs every file/directory change until interrupted",
    packages=find_packages(exclude=["tests"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "rich",
        "watchdog",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "fswatcher=fswatcher.cli:run"
        ]
    },
)
