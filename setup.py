from setuptools import find_packages, setup

setup(
    name="sfcwire",
    version="0.1.0",
    description="Single-file component compiler: block splitting, render-function codegen and virtual module resolution",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"sfcwire": ["templates/*.j2"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "jinja2>=3.1",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    zip_safe=False,
)
