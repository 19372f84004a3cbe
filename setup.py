from pathlib import Path

from setuptools import find_packages, setup


def read_requirements(path: Path) -> list[str]:
    with path.open("r") as f:
        return [x.strip() for x in f.readlines() if x.strip() and not x.startswith("#")]


HERE = Path(__file__).parent
INSTALL_REQUIRES = read_requirements(HERE / "requirements.txt")
TESTS_REQUIRE = read_requirements(HERE / "test_requirements.txt")
with (HERE / "git2bind" / "version.py").open("r") as f:
    version = {}
    exec(f.read(), version)
    VERSION = version["__version__"]


setup(
    name="git2bind",
    version=VERSION,
    description="Safe ctypes bindings for libgit2",
    # Possible options are at https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        "Development Status :: 3 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Libraries",
        "Topic :: Software Development :: Version Control :: Git",
    ],
    license="MIT",
    platforms=["GNU/Linux"],
    keywords="git libgit2 ctypes",
    packages=find_packages(include=["git2bind", "git2bind.*"]),
    include_package_data=True,
    package_data={},
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=INSTALL_REQUIRES,
    tests_require=TESTS_REQUIRE,
    extras_require={"test": TESTS_REQUIRE},
)
