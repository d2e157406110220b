from setuptools import setup, find_packages

setup(
    name="dutch-auction",
    version="0.1.0",
    author="Dutch Auction Team",
    description="Descending-price auctions of unique assets with escrow custody and atomic settlement",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pycryptodome>=3.19.0",
        "pydantic>=2.5.0",
        "click>=8.1.0",
        "python-dotenv>=1.0.0",
        "colorlog>=6.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dutch-auction=dutch_auction.cli.main:cli",
        ],
    },
)
