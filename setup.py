from setuptools import setup, find_packages

setup(
    name="journeyforge",
    version="0.1.0",
    description="JourneyForge - structured four-phase project journeys from generated text",
    author="Your Name",
    packages=find_packages(include=["journeyforge", "journeyforge.*"]),
    include_package_data=True,
    install_requires=[
        # Core data modeling and validation
        "pydantic>=2.0.0",

        # Environment variables
        "python-dotenv>=1.0.0",

        # CLI and rich output
        "typer>=0.9.0",
        "rich>=13.0.0",

        # YAML config files
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "journeyforge = journeyforge.app.cli:run",
        ],
    },
    python_requires=">=3.11",
    package_dir={"": "."},
)
