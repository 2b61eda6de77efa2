from setuptools import setup, find_packages

setup(
    name="quikprint",
    version="1.0.0",
    description="Storefront for a printing company: product configurator, pricing engine, cart, checkout and back-office API.",
    packages=find_packages(include=["quikprint", "quikprint.*"]),
    install_requires=[
        "django>=4.2",
        "djangorestframework",
        "drf-spectacular",
        "djangorestframework-simplejwt",
        "psycopg2-binary",
        "python-decouple",
        "requests",
    ],
    extras_require={
        "test": ["pytest", "pytest-django"],
    },
    python_requires=">=3.11",
)
