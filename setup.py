from setuptools import setup, find_packages

setup(
    name="pipe-lines",
    version="0.1.0",
    description="Read lines from a piped byte stream without truncation",
    packages=find_packages(include=["pipe_lines", "pipe_lines.*"]),
    python_requires=">=3.9",
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["pipe-lines=pipe_lines.cli:main"]},
)
