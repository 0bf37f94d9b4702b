from setuptools import setup


setup(
    version="0.1.0",
    name="docstore",
    description=(
        "in-memory JSON document store with path-addressable atomic "
        + "updates, key expiration, and a ranking index"
    ),
    license="MIT",
    python_requires=">=3.10",
    install_requires=[
        "sortedcontainers>=2",
    ],
    extras_require={
        "http": [
            "flask>=3",
            "requests>=2",
        ],
        "cors": [
            "flask>=3",
            "Flask-CORS>=4",
        ],
        "test": [
            "pytest>=7",
            "flask>=3",
            "requests>=2",
        ],
    },
    packages=[
        "docstore",
        "docstore.adapter",
        "docstore.middleware",
        "docstore.middleware.flask",
        "docstore.models",
        "docstore.store",
    ],
    package_data={
        "docstore": ["py.typed"],
        "docstore.middleware.flask": [
            "openapi.yaml",
        ],
    },
)
