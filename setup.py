from setuptools import find_namespace_packages, setup

setup(
    name="captionburn-renderer",
    version="1.0.0",
    packages=find_namespace_packages(include=["shared*", "services*"]),
    py_modules=["app"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.5",
        "aiohttp>=3.9",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "google-cloud-storage>=2.14",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
    python_requires=">=3.10",
    include_package_data=True,
    description="Caption burn-in render service (ASS captions, watermarks, ffmpeg)",
)
