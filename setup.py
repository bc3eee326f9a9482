"""Setup script for the Statement Lens package."""

from setuptools import setup, find_packages

setup(
    name="statement-lens",
    version="0.1.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "httpx>=0.27",
        "prometheus-client>=0.20",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "python-dotenv>=1.0",
        "python-multipart>=0.0.9",
        "structlog>=24.1",
        "uvicorn>=0.29",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "statement-lens=statement_lens.cli:main",
        ],
    },
    description="Statement Lens - POS statement analysis and chat proxies",
    author="Statement Lens Team",
)
