from os import path

import setuptools

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

with open(path.join(this_directory, "requirements.txt")) as f:
    requirements = f.read().splitlines()

with open(path.join(this_directory, "requirements-dev.txt")) as f:
    dev_requirements = f.read().splitlines()

entry_points = {"console_scripts": ["zapdesk = zapdesk.cli.cli:cli"]}

setuptools.setup(
    name="zapdesk",
    version="0.1.0",
    description="Lightning address invoices and QR codes for support-desk tips",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://knowall.ai",
    author="KnowAll AI",
    license="MIT",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={"dev": dev_requirements},
    include_package_data=True,
    entry_points=entry_points,
)
