import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Upload Terraform configurations to Terraform Cloud / Enterprise"

setuptools.setup(
    name="tfe-push",
    version="0.1.0",
    description="Upload Terraform configurations to Terraform Cloud / Enterprise",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["tfe_push", "tfe_push.*"]),
    install_requires=[
        "typer>=0.9",
        "rich",
        "requests",
        "pydantic>=2",
        "pathspec",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "tfe-push=tfe_push.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.10",
)
