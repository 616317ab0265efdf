"""Setup configuration for json-store-ecom project."""

from setuptools import setup, find_packages

setup(
    name="json-store-ecom",
    version="1.0.0",
    description="Products and shopping carts HTTP service over flat JSON collections, with FastAPI",
    author="json-store-ecom maintainers",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["view_carts"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "redis>=5.0.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.26",
        ],
    },
)
