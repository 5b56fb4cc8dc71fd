"""Setup script for geo_photo_kml package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README").read_text()

setup(
    name="geo-photo-kml",
    version="1.0.0",
    author="stbrie",
    description="A Python tool for mapping GPS-tagged photos as Google Earth KML",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "piexif>=1.1.3",
        "Pillow>=10.0.0",
        "geopy>=2.0.0",
        "lxml>=4.9.0",
        "shapely>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "geo-photo-kml=geo_photo_kml.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    keywords="gps exif photo kml google-earth thumbnails map",
)
