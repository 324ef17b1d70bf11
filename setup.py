import re

from setuptools import find_packages, setup


with open("pyterminfo/__init__.py", "rb") as fh:
    init_text = fh.read().decode()
    VERSION = re.search(r"__version__ = \"(.*?)\"", init_text).group(1)

setup(
    name="pyterminfo",
    version=VERSION,
    packages=find_packages(
        exclude=["tests", "tests.*", "examples", "examples.*"]
    ),
    python_requires=">=3.7.0",
    install_requires=[],
    extras_require={
        "tests": ["pytest"],
    },
    license="MIT",
    description="Read compiled terminfo entries and expand their parameterized strings, in pure Python.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="Almar Klein",
    author_email="almar.klein@gmail.com",
    zip_safe=True,
    entry_points={
        "console_scripts": [
            "pyterminfo = pyterminfo:cli",
        ],
    },
)
