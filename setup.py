"""Package setup for bitpay-sdk."""

from setuptools import setup

setup(
    name="bitpay-sdk",
    version="1.0.0",
    description="Signed, typed Python client for the BitPay payment API",
    packages=["bitpay_sdk"],
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "cryptography>=41.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
)
