"""
Setup script for Cipherslip - encrypted messages as copy-and-paste tokens.

Created by orpheus497

This package provides:
- Curve25519 identities generated and stored locally
- Public-key authenticated encryption (NaCl box)
- Self-contained text tokens, safe for copy/paste and QR codes
- A contact list of named public keys
- Terminal front end with optional QR rendering and scanning
- No servers, no transport, complete offline operation
"""

from setuptools import setup, find_packages
import os

this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='cipherslip',
    version='1.0.0',
    author='orpheus497',
    description='Public-key encrypted messages as self-contained copy-and-paste tokens',
    long_description=long_description,
    long_description_content_type='text/markdown',
    url='https://github.com/orpheus497/cipherslip',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: End Users/Desktop',
        'Topic :: Communications',
        'Topic :: Security :: Cryptography',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
        'Environment :: Console',
    ],
    python_requires='>=3.8',
    install_requires=[
        'PyNaCl>=1.5.0',
        'cryptography>=42.0.4',
        'rich>=13.7.0',
        'tomli>=2.0.1; python_version < "3.11"',
    ],
    extras_require={
        'qr': [
            'qrcode>=7.4.2',
            'pillow>=10.2.0',
            'pyzbar>=0.1.9',
        ],
        'test': [
            'pytest>=7.4.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'cipherslip=cipherslip.main:main',
        ],
    },
)
