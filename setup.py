from setuptools import setup, find_packages

setup(
    name='neurograph',
    version='0.1.0',
    author='neurograph developers',
    description='Minimal neural network engine built on a mutable directed graph',
    long_description='Graph-backed neural networks with forward propagation, memoized backpropagation '
                     'and a plain-text model format',
    packages=find_packages(exclude=['tests', 'tests.*']),
    zip_safe=False,
    python_requires='>=3.7',
    install_requires=['numpy>=1.19.0', 'click>=7.0'],
    extras_require={
        'networkx': ['networkx>=2.0'],
        'test': ['pytest>=6.0', 'networkx>=2.0'],
        'all': ['networkx>=2.0'],
    },
    entry_points={
        'console_scripts': ['neurograph=neurograph.cli:cli'],
    },
)
