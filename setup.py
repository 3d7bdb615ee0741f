from setuptools import setup, find_packages

setup(
    name             = 'commscope',
    version          = '1.0.0',
    description      = 'commscope — Partner analysis for mobile-extraction call, message and contact exports',
    author           = 'Nous Loop Solutions',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': [
            'pytest>=7.0',
            'httpx>=0.27',
        ],
    },
    entry_points     = {
        'console_scripts': [
            'commscope     = commscope.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
