from setuptools import setup, find_packages

setup(
    name="minesweeper_replay",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "flask",
        "pyyaml",
        "numpy"
    ],
    extras_require={
        "test": ["pytest"]
    },
    entry_points={
        "console_scripts": [
            "minesweeper-server=frontend.app:main",
            "minesweeper-leaderboard=evaluation.leaderboard:main"
        ]
    },
)
