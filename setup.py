from setuptools import setup, find_packages

setup(
    name="wol-compliance",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.5.0",
        "pywinrm>=0.4.3",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "wol-compliance=wol_compliance.cli:main",
            "wol-detect=wol_compliance.cli:detect_main",
            "wol-remediate=wol_compliance.cli:remediate_main",
        ],
    },
    python_requires=">=3.11",
)
