"""
Setup script for the resume-import project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_namespace_packages

setup(
    name="resume-import",
    version="0.1.0",
    # src/ and src/common/ have no __init__.py
    packages=find_namespace_packages(
        include=["src", "src.*", "profile_service", "profile_service.*"]
    ),
    python_requires=">=3.11",
    install_requires=[
        "python-dotenv>=1.0",
        "pydantic>=2.7",
        "pydantic-settings>=2.0",
        "langchain-core>=0.2",
        "langchain-openai>=0.1",
        "json-repair>=0.25",
        "requests>=2.31",
        "pymongo>=4.6",
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "python-multipart>=0.0.9",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-mock>=3.12",
            "httpx>=0.27",
        ],
    },
)
