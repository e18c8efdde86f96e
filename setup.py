from pathlib import Path

from setuptools import find_packages, setup

NAME = "efactura-ubl"
VERSION = "0.3.0"
DESCRIPTION = "UBL 2.1 / CIUS-RO invoice builder and validators for ANAF e-Factura"

README = Path("README.md")
LONG_DESCRIPTION = README.read_text(encoding="utf-8") if README.exists() else DESCRIPTION

setup(
    name=NAME,
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "lxml>=4.9",
        "openpyxl>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
)
