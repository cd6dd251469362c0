from setuptools import setup, find_packages

setup(
    name="jobtracker",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "sqlalchemy>=2.0",
        "python-dotenv",
        "python-dateutil",
        "PyJWT",
    ],
    extras_require={
        "dev": [
            "pytest",
            "httpx",
            "black",
            "isort",
            "mypy",
        ],
    },
    author="",
    author_email="",
    description="Job Application Tracker API",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    keywords="job search, application tracking, reminders",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
)
