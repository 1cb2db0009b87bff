import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='sklearn_domlem',
    version='0.0',
    packages=setuptools.find_packages(),
    license='BSD',
    description='Implementation of the *VC-DomLEM* sequential covering '
                'algorithm, inducing decision rules from rough '
                'approximations of ordered decision classes.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.6',
    install_requires=[
        'scikit_learn >= 0.22',
        'numpy',
    ],
    extras_require={
        'tests': ['pytest >= 3.5'],
    },
)
