from setuptools import setup, find_packages

setup(
    name="soap_comm",
    version="0.1.0",
    description="Minimal SOAP 1.1 client: envelope codec and request/response exchange",
    author="soap_comm developers",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "protobuf>=6.32.0",
        "httpx>=0.24.0",
        "opentelemetry-api>=1.34.0",
        "opentelemetry-sdk>=1.34.0",
        "opentelemetry-exporter-otlp>=1.34.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    python_requires=">=3.9",
)
