from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="amm-liquidity",
    version="0.1.0",
    author="Your Name",
    description="Liquidity provisioning and withdrawal for Uniswap V2 style pools",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "results", "venv"]),
    package_data={"amm_liquidity": ["abis.json", "addresses.json"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "web3>=7.0.0",
        "python-dotenv>=1.0.0",
        "eth-account>=0.13.0",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hexbytes>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "amm-liquidity=amm_liquidity.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
