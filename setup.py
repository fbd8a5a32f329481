from setuptools import setup, find_packages

setup(
    name="raydium-pools",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "solana>=0.36,<0.38",
        "solders>=0.23",
        "construct>=2.10",
        "python-dotenv",
        "colorama==0.4.6",
        "aiohttp>=3.9.3"
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["raydium-pools=raydium_pools.cli:main"],
    },
    python_requires=">=3.8",
)
