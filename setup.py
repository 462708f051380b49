"""
python -m build
twine upload dist/*
"""

from setuptools import setup, find_packages


def restpipe_setup():
    with open("requirements.txt", "rt") as fp:
        install_requires = fp.read().strip().split("\n")

    version = "0.3.0"

    setup(
        name="restpipe",
        packages=find_packages(exclude=["tests", "tests.*"]),
        version=version,
        license="MIT",
        description="restpipe : async CRUD resources with pluggable auth, throttling, validation and caching",
        long_description=open("README.rst").read(),
        keywords=["REST", "CRUD", "Flask", "FastAPI", "SqlAlchemy", "asyncio"],
        python_requires=">=3.9, <4",
        install_requires=install_requires,
        classifiers=[
            "Development Status :: 3 - Alpha",
            "License :: OSI Approved :: MIT License",
            "Intended Audience :: Developers",
            "Framework :: Flask",
            "Framework :: FastAPI",
            "Topic :: Software Development :: Libraries",
            "Environment :: Web Environment",
            "Programming Language :: Python :: 3.12",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.9",
        ],
        extras_require={"test": ["pytest>=7.0", "httpx>=0.24"]},
    )


restpipe_setup()  # pragma: no cover
