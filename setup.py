from setuptools import setup, find_packages

setup(
    name="subone_console",
    version="0.1.0",
    packages=find_packages(include=["core", "core.*", "config", "console"]),
    py_modules=["main"],
    install_requires=[
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.10",
)
