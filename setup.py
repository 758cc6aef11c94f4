from setuptools import find_namespace_packages, setup

setup(
    name="qobuz_pulse",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_namespace_packages(
        where="src", include=["qobuz_pulse", "qobuz_pulse.*"]
    ),
    python_requires=">=3.10",
    install_requires=[
        "dagster",
        "polars",
        "pydantic>=2",
        "python-dotenv",
    ],
    extras_require={"dev": ["dagster-webserver", "pytest"]},
)
