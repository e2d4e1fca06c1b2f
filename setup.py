#package configuration file
#!/usr/bin/env python3
from setuptools import setup
setup(
    name='snapgit',
    version='1.0',
    packages=['snapgit'],
    python_requires='>=3.10',
    extras_require={
        'test': ['pytest', 'pytest-asyncio'],
    },
    entry_points={
        'console_scripts':[
            'snapgit=snapgit.cli:main'
        ]
    }
)
