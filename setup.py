from setuptools import setup, find_packages

setup(
    name='scl_ied_toolkit',
    version='0.1.0',
    description='Extract standalone CID files for single IEDs from IEC 61850 SCL documents',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'lxml>=4.9.0',
    ],
    extras_require={
        'dev': ['pytest>=7.0'],
        'mcp': ['mcp[cli]>=1.2.0,<2'],
    },
    entry_points={
        'console_scripts': [
            'scl-ied-mcp-server=scl_ied_toolkit.mcp_server:main',
        ],
    },
)
