from __future__ import annotations

import os
import sys

from setuptools import find_packages, setup

dependencies = [
    "click==8.1.7",  # For the CLI
    "colorlog==6.8.2",  # Adds color to logs
    "concurrent-log-handler==0.9.25",  # Concurrently log and rotate logs
    "filelock==3.13.1",  # For reading the config file safely while another process writes it
    "importlib-resources==6.1.1",  # Reads the packaged initial config
    "PyYAML==6.0.1",  # Used for config file format
    "typing-extensions==4.10.0",  # typing backports like final and assert_never
]

dev_dependencies = [
    "build==1.0.3",
    "coverage==7.4.1",
    "pylint==3.0.3",
    "pytest==8.0.2",
    "pytest-cov==4.1.0",
    "pytest-mock==3.12.0",
    "isort==5.13.2",
    "flake8==7.0.0",
    "mypy==1.8.0",
    "black==23.12.1",
    "types-pyyaml==6.0.12.12",
    "types-setuptools==69.1.0.20240217",
]

kwargs = dict(
    name="bcos-sdk",
    version="0.1.0",
    description="Crypto material configuration for the BCOS blockchain SDK.",
    license="Apache License",
    python_requires=">=3.9, <4",
    keywords="bcos blockchain sdk tls sm",
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
    ),
    packages=find_packages(include=["bcos_sdk", "bcos_sdk.*"]),
    entry_points={
        "console_scripts": [
            "bcos = bcos_sdk.cmds.bcos:main",
        ]
    },
    package_data={
        "bcos_sdk": ["initial-*.yaml", "py.typed"],
    },
    zip_safe=False,
)

if "setup_file" in sys.modules:
    # include dev deps in regular deps when run in snyk
    dependencies.extend(dev_dependencies)

if len(os.environ.get("BCOS_SDK_SKIP_SETUP", "")) < 1:
    setup(**kwargs)  # type: ignore
