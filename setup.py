#!/usr/bin/env python3
"""Setup script for sqltunnel."""

from setuptools import setup, find_packages
import os

# Read the README file
here = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = 'sqltunnel - run SQL operations against a remote database over HTTP'

setup(
    name='sqltunnel',
    version='0.1.0',
    description='sqltunnel - run SQL operations against a remote database over HTTP',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(include=['sqltunnel', 'sqltunnel.*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'pydantic>=2.0.0',
        'httpx>=0.24.0',
        'python-dotenv>=1.0.0',
    ],
    extras_require={
        'server': [
            'fastapi>=0.100.0',
            'uvicorn[standard]>=0.23.0',
        ],
        'dev': [
            'pytest>=7.0.0',
            'pytest-mock>=3.11.0',
            'fastapi>=0.100.0',
            'uvicorn>=0.23.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'sqltunnel=sqltunnel.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Database',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    keywords='sql database proxy http tunnel',
)
