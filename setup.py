import setuptools

def get_version():
    with open("layertar/__init__.py") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"')

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="layertar",
    version=get_version(),
    description="Build and unpack tar archives used as container image layers.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX",
        "Topic :: System :: Archiving",
        "Intended Audience :: Developers",
    ],
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10.0",
    install_requires=[
        "pydantic>=2.0",
    ],
    keywords="tar, container, oci, layer, whiteout, hardlink",
)
