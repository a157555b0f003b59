from setuptools import setup

setup(
    name="pytest-testbuilder",
    version="0.1.0",
    author="pytest-testbuilder contributors",
    packages=["pytest_testbuilder"],
    package_dir={"": "src"},
    # the following makes a plugin available to pytest
    entry_points={"pytest11": ["pytest_testbuilder = pytest_testbuilder.plugin"]},
    # custom PyPI classifier for pytest plugins
    classifiers=["Framework :: Pytest"],
    python_requires=">=3.9",
    install_requires=["pytest>=7.0"],
)
