from setuptools import setup, find_packages

setup(
    name="collabnet-mailer",
    version="1.0.0",
    description="Convert CollabNet discussion forums into mail messages",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=4.9.0",
        "tqdm>=4.66.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "collabnet-mailer=collabnet_mailer.cli:main",
        ],
    },
    python_requires=">=3.8",
)
