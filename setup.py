from setuptools import setup, find_packages

install_requires = [

]

tests_require = [
    "pytest",
    "hypothesis",
    "cytoolz",
]

setup(
    name = "hwmap",
    version = "0.1.0",
    description = (
        "Ordered, bounded-concurrency map over iterables and async iterables"
    ),
    license = "MIT",
    keywords = ["asyncio", "threading", "pipeline", "backpressure", "concurrency"],
    packages = find_packages(exclude=["tests", "tests.*"]),
    python_requires = ">=3.10",
    install_requires = install_requires,
    extras_require = {"test": tests_require},
)
