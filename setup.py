# setup.py
from setuptools import setup, find_packages

setup(
    name="tern",
    version="0.1.0",
    description="A tree-walking interpreter for the Tern scripting language",
    packages=find_packages(include=["tern", "tern.*", "tern_lsp", "tern_lsp.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pygls>=1.0,<2",
        "lsprotocol",
    ],
    extras_require={
        "test": ["pytest", "hypothesis>=6.82"],
    },
    entry_points={
        "console_scripts": ["tern-ls=tern_lsp.server:main"],
    },
    zip_safe=False,
)
