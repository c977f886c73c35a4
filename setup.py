from setuptools import setup, find_packages

setup(
    name="rejection-service",
    version="1.0.0",
    description="Rejection as a Service: random rejection reasons behind a per-IP rate limiter",
    packages=find_packages(include=["rejector", "rejector.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "starlette>=0.37",
        "uvicorn[standard]>=0.29",
        "pydantic>=2.6",
        "pydantic-settings>=2.3",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "rejector=rejector.app.main:run",
        ],
    },
)
