import setuptools

setuptools.setup(
    name='causalgraph',
    version='0.1a.1',
    description='Causal graph reasoning: d-separation, adjustment sets and the PC algorithm',
    long_description='CausalGraph is a Python package for reasoning about causal DAGs and learning their Markov '
                     'equivalence classes from data.',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    zip_safe=False,
    classifiers=[
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
    ],
    install_requires=[
        'scipy',
        'numpy',
        'pandas',
        'networkx',
        'joblib',
        'tqdm',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
