# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="superscan",
    version="1.0.0",
    description="Lista, replica o muestrea árboles de ficheros de sistemas de archivos, S3 y Google Drive",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["superscan", "superscan.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Google Drive REST API y OAuth2
        "boto3",     # Backend S3
        "botocore",  # Importado directamente por el backend S3 (Config, ClientError)
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'superscan=superscan.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
