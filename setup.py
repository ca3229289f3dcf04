import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    author="Walnut",
    author_email="walnut356@gmail.com",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    description="Replay judgement library for osu! replay and beatmap files",
    extras_require={"test": ["pytest"]},
    install_requires=["polars", "tzlocal"],
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="py-osu-judge",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    version="0.1.0",
)
