"""
Setup configuration for the robo-web-test-kit pytest plugin
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = ""
readme_file = this_directory / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding='utf-8')

setup(
    name="robo-web-test-kit",
    version="1.0.0",
    description="Browser test-automation kit: pytest plugin, per-thread Selenium sessions and per-group Spark HTML reports with screenshots",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    include_package_data=True,
    package_data={
        'robo_web_test_kit': [
            'templates/**/*',
        ],
    },
    classifiers=[
        "Framework :: Pytest",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Testing :: Acceptance",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pytest>=7.0.0",
        "jinja2>=3.0.0",
        "pandas>=2.0.0",
        "openpyxl>=3.1.0",
        "selenium>=4.10.0",
        "python-dotenv>=1.0.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "parallel": ["pytest-xdist>=3.0.0"],
        "test": ["pytest>=7.0.0", "pytest-xdist>=3.0.0"],
    },
    entry_points={
        "pytest11": [
            "robo-web-test-kit = robo_web_test_kit.plugin",
        ]
    },
    keywords="pytest selenium reporting html screenshots test-automation automation-testing robo",
)
