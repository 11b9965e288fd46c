from setuptools import setup, find_packages
import os
import version


readme_path = os.path.join(os.path.dirname(__file__), "README.rst")
with open(readme_path, "r") as fp:
    readme_text = fp.read()


version_for_setup_py = version.get_project_version("statsdinstrument/version.py")
version_for_setup_py = ".dev".join(version_for_setup_py.split("-", 2)[:2])


setup(
    name="statsdinstrument",
    version=version_for_setup_py,
    zip_safe=False,
    packages=find_packages(exclude=["test", "test.*"]),
    install_requires=[
        "pydantic >= 2.0",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    dependency_links=[],
    package_data={},
    entry_points={
        "console_scripts": [
            "statsdinstrument_send = statsdinstrument.cli:main",
        ],
    },
    author="Aiven",
    license="Apache 2.0",
    platforms=["POSIX", "MacOS"],
    description="StatsD and DogStatsD metrics client with pluggable sinks",
    long_description=readme_text,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Monitoring",
        "Topic :: Software Development :: Libraries",
    ],
)
