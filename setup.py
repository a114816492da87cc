import json
from os.path import dirname, abspath

from setuptools import setup, find_packages

with open("README.md", "r") as readme_file:
    readme = readme_file.read()

requirements = ["requests>=2.20.0", "PyYAML>=5.1", "urllib3"]
test_requirements = ["pytest"]

LIBRARY_NAME_KEY = "library_name"
PACKAGE_NAME_KEY = "package_name"
PACKAGE_VERSION_KEY = "package_version"

with open(f"{dirname(abspath(__file__))}/src/config_cloner/configurations/system_config.json") as fp:
    system_config = json.load(fp)
setup(
    name=system_config.get(PACKAGE_NAME_KEY),
    version=system_config.get(PACKAGE_VERSION_KEY),
    description="Clone jobs, views and nodes between Jenkins instances through the Jenkins remote API",
    long_description=readme,
    long_description_content_type="text/markdown",
    package_dir={'': 'src'},
    packages=find_packages('src'),
    install_requires=requirements,
    extras_require={"test": test_requirements},
    include_package_data=True,
    python_requires=">=3.8",
    entry_points={
        'console_scripts': [
            f"{system_config.get(LIBRARY_NAME_KEY)} = {system_config.get(LIBRARY_NAME_KEY)}.main:main"
        ]
    }
)
