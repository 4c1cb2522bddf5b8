import setuptools

setuptools.setup(
    name="wgsim",
    version="0.1.0",
    python_requires=">=3.7",
    install_requires=[
        "h5py",
        "numpy",
        "schematics",
        "scipy",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "pytest-xdist",
        ],
        "dev": [
            "pylint",
            "pytype",
            "yapf",
        ],
    },
    packages=setuptools.find_packages(),
)
