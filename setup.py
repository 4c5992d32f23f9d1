import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="rawtile",
    version="0.0.1",
    description="Raster graphics inside arbitrary binary files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=['rawtile', 'rawtile.*']),
    install_requires=[
        'bitstring>=4,<5',
        'numpy',
        'pillow',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPLv2 License",
        "Operating System :: OS Independent",
    ],
)
