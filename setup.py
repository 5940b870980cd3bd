"""Setup configuration for ShuttleTrack."""

from setuptools import setup, find_packages

with open("docs/README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="shuttletrack",
    version="0.1.0",
    description="Real-time campus shuttle and subway departure board",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.25.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.20.0",
        "python-dotenv>=1.0.0",
        "tzdata; platform_system == 'Windows'",
    ],
    extras_require={
        "dev": ["pytest>=6.0", "httpx>=0.24", "black", "flake8"],
    },
    entry_points={
        "console_scripts": ["shuttletrack=shuttletrack.server:main"],
    },
)
