from setuptools import find_packages, setup


setup(
    name="virtual-notify",
    version="0.1.0",
    description="Cross-process event notification over marker files and an advisory file lock.",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "tenacity>=8.3",
        "structlog>=24.1",
        "rich>=13.7",
        "typer>=0.12",
        "filelock>=3.12",
    ],
    extras_require={
        "dev": ["pytest>=8.0", "ruff>=0.6", "mypy>=1.8"],
    },
    entry_points={"console_scripts": ["virtual-notify=virtual_notify.cli:app"]},
)
