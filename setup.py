"""
Setup script for the Watchlist Sync package.
Allows installation with: pip install -e .
"""
from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text().splitlines()
        if line.strip() and not line.startswith('#')
    ]

setup(
    name="watchlist-sync",
    version="1.0.0",
    description="Rate-limited quote and daily price synchronization for a securities watch list",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["watchlist_sync", "watchlist_sync.*"]),
    include_package_data=True,
    package_data={
        "watchlist_sync": ["config.yaml", "sql/*.sql"],
    },
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Office/Business :: Financial :: Investment",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="market data yahoo finance massive nse watchlist postgresql",
    entry_points={
        "console_scripts": [
            "watchlist-sync=watchlist_sync.scripts.sync_watchlist:main",
            "watchlist-daily-update=watchlist_sync.scripts.run_daily_update:main",
            "watchlist-search=watchlist_sync.scripts.search_symbols:main",
            "watchlist-init-db=watchlist_sync.scripts.init_db:main",
        ],
    },
)
