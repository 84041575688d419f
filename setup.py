from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="mixdcm",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=[
        "numpy",
        "pandas",
        "dill",
        "dask[array]",
    ],
    extras_require={
        "test": [
            "pytest",
            "scipy",
        ],
    },
    author="Matthew Wigginton Conway",
    author_email="matt@indicatrix.org",
    description="Discrete choice tables for mixed logit estimation in Python",
    long_description_content_type="text/markdown",
    long_description=long_description,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: Apache Software License",
        "Development Status :: 3 - Alpha",
    ],
)
