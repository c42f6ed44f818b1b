from setuptools import setup, find_packages

setup(
    name="sparkgrid-vpp",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "numpy>=1.20.0",
        "PyYAML>=5.4",     # For YAML configuration files
        "requests>=2.25.0",  # For the advisory service client
    ],
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'black>=21.5b2',
            'mypy>=0.900',
            'types-requests',
            'types-PyYAML',
        ],
    },
    author="SparkGrid Development Team",
    description="Virtual power plant grid simulation with scenario perturbations and AI advisory",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Topic :: Scientific/Engineering :: Energy",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    package_data={
        "sparkgrid": ["py.typed"],
    },
    zip_safe=False,
)
