from setuptools import setup, find_packages

setup(
    name="blockaway",
    version="1.0.0",
    description="Block Puzzle Solvability Search & Difficulty Analyzer",
    packages=find_packages(include=["blockaway", "blockaway.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.21.0",
        "matplotlib>=3.5.0",
        "seaborn>=0.11.0",
        "tqdm>=4.62.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "blockaway=blockaway.cli:main",
        ],
    },
)
