from setuptools import setup, find_packages

setup(
    name='tyr-vm',
    version='0.1.0',
    description='Tyr stack-based bytecode interpreter',
    author='Tyr contributors',
    package_dir={'': 'src'},
    packages=find_packages(where='src', include=['tyr', 'tyr.*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'click>=7.0',
        'rich>=9.0'
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'tyr = tyr.cli.main:cli'
        ]
    },
    classifiers=[
        'Programming Language :: Python :: 3',
    ],
)
