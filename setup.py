#!/usr/bin/env python3
"""
Setup configuration for lyricfx
Synchronized lyrics overlay with reactive visual effects
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "requests>=2.31.0",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
    "aiohttp>=3.9.1",
    "asyncio-throttle>=1.0.2",
]

setup(
    name="lyricfx",
    version="0.3.0",
    author="lyricfx contributors",
    description="Synchronized lyrics overlay with AI-generated visual effects",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/lyricfx/lyricfx",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyricfx=lyricfx.main:cli",
        ],
    },
    keywords="lyrics lrc lrclib karaoke mpris playerctl gemini effects cli",
    project_urls={
        "Bug Reports": "https://github.com/lyricfx/lyricfx/issues",
        "Source": "https://github.com/lyricfx/lyricfx",
    },
)
